from typing import Annotated, Any, Dict, Generic, List, Literal, Optional, TypeVar, Union
from pydantic import BaseModel, ConfigDict, Field

MediaType = Literal['movie', 'tv', 'person']
MEDIA_TYPES = ('movie', 'tv', 'person')

T = TypeVar('T')


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(extra='ignore')


class KnownForItem(_UpstreamModel):
    """Movie or TV entry embedded in a person record, kept as upstream sends it."""
    adult: Optional[bool] = None
    backdrop_path: Optional[str] = None
    genre_ids: List[int] = Field(default_factory=list)
    id: int
    media_type: str
    original_language: str = ''
    original_title: Optional[str] = None
    original_name: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    first_air_date: Optional[str] = None
    title: Optional[str] = None
    name: Optional[str] = None
    video: Optional[bool] = None
    vote_average: float = 0.0
    vote_count: int = 0
    origin_country: Optional[List[str]] = None


class Movie(_UpstreamModel):
    adult: bool = False
    backdrop_path: Optional[str] = None
    genre_ids: List[int] = Field(default_factory=list)
    id: int
    original_language: str = ''
    original_title: str = ''
    overview: Optional[str] = None
    popularity: float = 0.0
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    title: str = ''
    video: bool = False
    vote_average: float = 0.0
    vote_count: int = 0


class TVShow(_UpstreamModel):
    adult: bool = False
    backdrop_path: Optional[str] = None
    genre_ids: List[int] = Field(default_factory=list)
    id: int
    origin_country: List[str] = Field(default_factory=list)
    original_language: str = ''
    original_name: str = ''
    overview: Optional[str] = None
    popularity: float = 0.0
    poster_path: Optional[str] = None
    first_air_date: Optional[str] = None
    name: str = ''
    vote_average: float = 0.0
    vote_count: int = 0


class Person(_UpstreamModel):
    adult: bool = False
    gender: int = 0
    id: int
    known_for: List[KnownForItem] = Field(default_factory=list)
    known_for_department: str = ''
    name: str = ''
    original_name: str = ''
    popularity: float = 0.0
    profile_path: Optional[str] = None


NativeRecord = Union[Movie, TVShow, Person]


class _Projections:
    """
    Partial projections from a unified result back to its native record.
    Each one is total when the discriminant matches and returns None otherwise.
    """

    def _project(self, media_type: str, native_cls):
        if self.media_type != media_type:
            return None
        return native_cls.model_validate(
            {name: getattr(self, name) for name in native_cls.model_fields}
        )

    def as_movie(self) -> Optional[Movie]:
        return self._project('movie', Movie)

    def as_tv_show(self) -> Optional[TVShow]:
        return self._project('tv', TVShow)

    def as_person(self) -> Optional[Person]:
        return self._project('person', Person)


class MovieResult(Movie, _Projections):
    media_type: Literal['movie'] = 'movie'


class TVResult(TVShow, _Projections):
    media_type: Literal['tv'] = 'tv'


class PersonResult(Person, _Projections):
    media_type: Literal['person'] = 'person'


# Each variant only declares the fields of its own resource, so fields of
# the other variants are never present, not even as null.
UnifiedResult = Annotated[
    Union[MovieResult, TVResult, PersonResult],
    Field(discriminator='media_type'),
]


class Page(BaseModel, Generic[T]):
    """Upstream pagination envelope; values are never recomputed locally."""
    page: int = 1
    results: List[T] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0


MoviePage = Page[Movie]
TVPage = Page[TVShow]
PersonPage = Page[Person]
# Combined search items are unified one by one so that unknown media types
# can be dropped without failing the whole page.
MultiSearchPage = Page[Dict[str, Any]]


class UnifiedPage(BaseModel):
    page: int = 1
    results: List[UnifiedResult] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0
