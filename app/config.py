from functools import lru_cache
from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ('debug', 'info', 'warn', 'error')


class Settings(BaseSettings):
    TMDB_API_KEY: str
    TMDB_BASE_URL: str = 'https://api.themoviedb.org/3'
    TMDB_TIMEOUT: float = 30.0
    TMDB_MAX_CONNECTIONS: int = 100
    TMDB_MAX_KEEPALIVE_CONNECTIONS: int = 10
    TMDB_KEEPALIVE_EXPIRY: float = 90.0

    # Upper bound for all upstream work done on behalf of one inbound request.
    REQUEST_DEADLINE: float = 30.0

    PORT: int = 8080
    ENV: str = 'development'
    CORS_ORIGINS: str = 'http://localhost:3000,http://localhost:3005'
    LOG_LEVEL: str = 'info'

    model_config = SettingsConfigDict(
        env_file='.env',
        extra='ignore',
    )

    @field_validator('TMDB_API_KEY')
    @classmethod
    def _api_key_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError('TMDB_API_KEY is required')
        return value

    @field_validator('TMDB_BASE_URL')
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip('/')

    @field_validator('LOG_LEVEL')
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        if value.lower() not in LOG_LEVELS:
            raise ValueError(
                f"invalid log level: {value} (valid: {', '.join(LOG_LEVELS)})")
        return value.lower()

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(',') if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == 'production'


@lru_cache()
def get_settings() -> Settings:
    return Settings()
