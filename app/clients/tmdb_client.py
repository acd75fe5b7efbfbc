from typing import Any, Dict, Optional, Type, TypeVar
import httpx
from pydantic import BaseModel, ValidationError
from ..config import Settings
from ..schemas.media_schemas import MoviePage, MultiSearchPage, PersonPage, TVPage
from ..utils.call_context import CallContext
from ..utils.errors import (
    GatewayDecodeError,
    MalformedRequestError,
    QueryValidationError,
    UpstreamError,
    UpstreamTransportError,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)

M = TypeVar('M', bound=BaseModel)

USER_AGENT = 'Media-Search-Gateway/1.0'
TRENDING_WINDOWS = ('day', 'week')


class _UpstreamErrorBody(BaseModel):
    status_code: int
    status_message: str
    success: bool = False


class TMDBClient:
    """
    Client for the TMDB REST API.

    One instance owns one pooled ``httpx.AsyncClient`` that is shared by
    every inbound request. The API key is injected into every call here;
    callers never see it.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None
    ) -> None:
        self._api_key = settings.TMDB_API_KEY
        self._base_url = settings.TMDB_BASE_URL
        self._headers = {
            'Accept': 'application/json',
            'User-Agent': USER_AGENT,
        }
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.TMDB_TIMEOUT),
            limits=httpx.Limits(
                max_connections=settings.TMDB_MAX_CONNECTIONS,
                max_keepalive_connections=settings.TMDB_MAX_KEEPALIVE_CONNECTIONS,
                keepalive_expiry=settings.TMDB_KEEPALIVE_EXPIRY,
            ),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- request plumbing ------------------------------------------------

    async def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        response_model: Optional[Type[M]] = None,
        ctx: Optional[CallContext] = None,
    ):
        """
        Perform a GET against ``path`` and decode the body.

        :param path: resource path, e.g. ``/search/movie``.
        :param params: query parameters; ``None`` values are dropped.
        :param response_model: pydantic shape of a successful body. When
            omitted the decoded JSON object is returned untouched.
        :param ctx: cancellation/deadline of the inbound request.
        :raises UpstreamError: upstream answered with status >= 400.
        :raises GatewayDecodeError: a successful body could not be decoded.
        :raises UpstreamTransportError: the request never got a response.
        :raises UpstreamCancelledError: ``ctx`` finished before the response.
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        query['api_key'] = self._api_key
        ctx = ctx or CallContext()

        try:
            resp = await ctx.run(self._client.get(
                f"{self._base_url}{path}", params=query, headers=self._headers
            ))
        except httpx.TimeoutException as exc:
            raise UpstreamTransportError(
                f"Request to {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamTransportError(
                f"Request to {path} failed: {type(exc).__name__}") from exc

        return self._handle_response(path, resp, response_model)

    def _handle_response(
        self,
        path: str,
        resp: httpx.Response,
        response_model: Optional[Type[M]]
    ):
        if resp.status_code >= 400:
            error = self._decode_error(resp)
            logger.warning(
                'tmdb_error_response',
                path=path,
                status=error.status_code,
                message=error.message,
            )
            raise error

        try:
            data = resp.json()
            if response_model is not None:
                return response_model.model_validate(data)
        except ValueError as exc:
            # pydantic's ValidationError is a ValueError as well
            raise GatewayDecodeError(
                f"Failed to parse response JSON from {path}") from exc

        if not isinstance(data, dict):
            raise GatewayDecodeError(
                f"Unexpected JSON payload from {path}: {type(data).__name__}")
        return data

    @staticmethod
    def _decode_error(resp: httpx.Response) -> UpstreamError:
        """
        Build an UpstreamError from an error response. The provider's own
        ``status_message`` is used when the body has one, otherwise the raw
        body text is kept verbatim.
        """
        try:
            body = _UpstreamErrorBody.model_validate(resp.json())
        except (ValueError, ValidationError):
            return UpstreamError(resp.status_code, resp.text)
        return UpstreamError(resp.status_code, body.status_message)

    @staticmethod
    def _require_query(query: str) -> str:
        if not query or not query.strip():
            raise QueryValidationError(
                'query', 'search query cannot be empty')
        return query

    @staticmethod
    def _require_id(resource_id: int, label: str) -> int:
        if resource_id <= 0:
            raise MalformedRequestError(
                'id',
                f"invalid {label} ID: {resource_id}",
                error_kind='invalid_parameter',
            )
        return resource_id

    @staticmethod
    def _page_param(page: int) -> Optional[int]:
        return page if page > 0 else None

    # --- search ----------------------------------------------------------

    async def search_movies(
        self,
        query: str,
        page: int = 1,
        language: Optional[str] = None,
        year: Optional[int] = None,
        ctx: Optional[CallContext] = None
    ) -> MoviePage:
        params = {
            'query': self._require_query(query),
            'page': self._page_param(page),
            'language': language or None,
            'year': year,
        }
        return await self._get('/search/movie', params, MoviePage, ctx)

    async def search_tv(
        self,
        query: str,
        page: int = 1,
        language: Optional[str] = None,
        ctx: Optional[CallContext] = None
    ) -> TVPage:
        params = {
            'query': self._require_query(query),
            'page': self._page_param(page),
            'language': language or None,
        }
        return await self._get('/search/tv', params, TVPage, ctx)

    async def search_people(
        self,
        query: str,
        page: int = 1,
        language: Optional[str] = None,
        ctx: Optional[CallContext] = None
    ) -> PersonPage:
        params = {
            'query': self._require_query(query),
            'page': self._page_param(page),
            'language': language or None,
        }
        return await self._get('/search/person', params, PersonPage, ctx)

    async def search_multi(
        self,
        query: str,
        page: int = 1,
        language: Optional[str] = None,
        ctx: Optional[CallContext] = None
    ) -> MultiSearchPage:
        params = {
            'query': self._require_query(query),
            'page': self._page_param(page),
            'language': language or None,
        }
        return await self._get('/search/multi', params, MultiSearchPage, ctx)

    # --- movies ----------------------------------------------------------

    async def get_movie_details(
        self, movie_id: int, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(movie_id, 'movie')
        return await self._get(f"/movie/{movie_id}", ctx=ctx)

    async def get_movie_credits(
        self, movie_id: int, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(movie_id, 'movie')
        return await self._get(f"/movie/{movie_id}/credits", ctx=ctx)

    async def get_movie_reviews(
        self, movie_id: int, page: int = 1, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(movie_id, 'movie')
        return await self._get(
            f"/movie/{movie_id}/reviews", {'page': self._page_param(page)}, ctx=ctx
        )

    async def get_popular_movies(
        self, page: int = 1, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        return await self._get(
            '/movie/popular', {'page': self._page_param(page)}, ctx=ctx)

    async def get_top_rated_movies(
        self, page: int = 1, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        return await self._get(
            '/movie/top_rated', {'page': self._page_param(page)}, ctx=ctx)

    # --- tv --------------------------------------------------------------

    async def get_tv_details(
        self, tv_id: int, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(tv_id, 'TV show')
        return await self._get(f"/tv/{tv_id}", ctx=ctx)

    async def get_tv_credits(
        self, tv_id: int, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(tv_id, 'TV show')
        return await self._get(f"/tv/{tv_id}/credits", ctx=ctx)

    async def get_tv_reviews(
        self, tv_id: int, page: int = 1, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(tv_id, 'TV show')
        return await self._get(
            f"/tv/{tv_id}/reviews", {'page': self._page_param(page)}, ctx=ctx
        )

    # --- people ----------------------------------------------------------

    async def get_person_details(
        self, person_id: int, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(person_id, 'person')
        return await self._get(f"/person/{person_id}", ctx=ctx)

    async def get_person_movie_credits(
        self, person_id: int, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(person_id, 'person')
        return await self._get(f"/person/{person_id}/movie_credits", ctx=ctx)

    async def get_person_tv_credits(
        self, person_id: int, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(person_id, 'person')
        return await self._get(f"/person/{person_id}/tv_credits", ctx=ctx)

    async def get_person_combined_credits(
        self, person_id: int, ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        self._require_id(person_id, 'person')
        return await self._get(f"/person/{person_id}/combined_credits", ctx=ctx)

    # --- trending --------------------------------------------------------

    async def get_trending(
        self,
        media_type: str,
        time_window: str = 'week',
        page: int = 1,
        ctx: Optional[CallContext] = None
    ) -> Dict[str, Any]:
        """
        Trending movies or TV shows. An unknown ``time_window`` falls back
        to ``week``.
        """
        if media_type not in ('movie', 'tv'):
            raise MalformedRequestError(
                'media_type',
                f"unsupported trending media type: {media_type}",
                error_kind='invalid_parameter',
            )
        if time_window not in TRENDING_WINDOWS:
            time_window = 'week'
        return await self._get(
            f"/trending/{media_type}/{time_window}",
            {'page': self._page_param(page)},
            ctx=ctx,
        )
