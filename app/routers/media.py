"""
Per-resource lookups. Upstream payloads are forwarded unmodified; failures
are translated with the resource context of the route.
"""
from typing import Any, Awaitable, Dict, Optional
from fastapi import APIRouter, Depends
from ..clients.tmdb_client import TMDBClient
from ..deps import get_call_context, get_gateway
from ..schemas.search_schemas import ErrorResponse
from ..utils.call_context import CallContext
from ..utils.error_translator import ResourceContext, translate_error
from ..utils.errors import UPSTREAM_FAILURES, MalformedRequestError
from ..utils.logging import get_logger
from ..utils.normalizer import parse_lenient_page, parse_resource_id

logger = get_logger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {'model': ErrorResponse},
    404: {'model': ErrorResponse},
    405: {'model': ErrorResponse},
    500: {'model': ErrorResponse},
}


async def _forward(
    call: Awaitable[Dict[str, Any]],
    context: ResourceContext,
    action: str,
    resource_id: Optional[int] = None
) -> Dict[str, Any]:
    try:
        payload = await call
    except UPSTREAM_FAILURES as exc:
        raise translate_error(
            exc, context, resource_id=resource_id, action=action) from exc
    logger.info('lookup_completed', action=action, resource_id=resource_id)
    return payload


# --- movies --------------------------------------------------------------
# Static paths are registered before /movies/{movie_id}.

@router.get('/movies/popular', tags=['movies'], responses=_ERROR_RESPONSES)
async def popular_movies(
    page: Optional[str] = None,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    return await _forward(
        gateway.get_popular_movies(parse_lenient_page(page), ctx=ctx),
        'search', 'popular movies')


@router.get('/movies/top_rated', tags=['movies'], responses=_ERROR_RESPONSES)
async def top_rated_movies(
    page: Optional[str] = None,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    return await _forward(
        gateway.get_top_rated_movies(parse_lenient_page(page), ctx=ctx),
        'search', 'top rated movies')


@router.get('/movies/{movie_id}', tags=['movies'], responses=_ERROR_RESPONSES)
async def movie_details(
    movie_id: str,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    mid = parse_resource_id(movie_id, 'Movie')
    return await _forward(
        gateway.get_movie_details(mid, ctx=ctx), 'movie', 'movie details', mid)


@router.get('/movies/{movie_id}/credits', tags=['movies'], responses=_ERROR_RESPONSES)
async def movie_credits(
    movie_id: str,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    mid = parse_resource_id(movie_id, 'Movie')
    return await _forward(
        gateway.get_movie_credits(mid, ctx=ctx), 'movie', 'movie credits', mid)


@router.get('/movies/{movie_id}/reviews', tags=['movies'], responses=_ERROR_RESPONSES)
async def movie_reviews(
    movie_id: str,
    page: Optional[str] = None,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    mid = parse_resource_id(movie_id, 'Movie')
    return await _forward(
        gateway.get_movie_reviews(mid, parse_lenient_page(page), ctx=ctx),
        'movie', 'movie reviews', mid)


# --- tv ------------------------------------------------------------------

@router.get('/tv/{tv_id}', tags=['tv'], responses=_ERROR_RESPONSES)
async def tv_details(
    tv_id: str,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    tid = parse_resource_id(tv_id, 'TV show')
    return await _forward(
        gateway.get_tv_details(tid, ctx=ctx), 'tv', 'TV show details', tid)


@router.get('/tv/{tv_id}/credits', tags=['tv'], responses=_ERROR_RESPONSES)
async def tv_credits(
    tv_id: str,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    tid = parse_resource_id(tv_id, 'TV show')
    return await _forward(
        gateway.get_tv_credits(tid, ctx=ctx), 'tv', 'TV show credits', tid)


@router.get('/tv/{tv_id}/reviews', tags=['tv'], responses=_ERROR_RESPONSES)
async def tv_reviews(
    tv_id: str,
    page: Optional[str] = None,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    tid = parse_resource_id(tv_id, 'TV show')
    return await _forward(
        gateway.get_tv_reviews(tid, parse_lenient_page(page), ctx=ctx),
        'tv', 'TV show reviews', tid)


# --- people --------------------------------------------------------------

@router.get('/person/{person_id}', tags=['people'], responses=_ERROR_RESPONSES)
async def person_details(
    person_id: str,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    pid = parse_resource_id(person_id, 'Person')
    return await _forward(
        gateway.get_person_details(pid, ctx=ctx), 'person', 'person details', pid)


@router.get('/person/{person_id}/movie_credits', tags=['people'], responses=_ERROR_RESPONSES)
async def person_movie_credits(
    person_id: str,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    pid = parse_resource_id(person_id, 'Person')
    return await _forward(
        gateway.get_person_movie_credits(pid, ctx=ctx),
        'person', 'person movie credits', pid)


@router.get('/person/{person_id}/tv_credits', tags=['people'], responses=_ERROR_RESPONSES)
async def person_tv_credits(
    person_id: str,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    pid = parse_resource_id(person_id, 'Person')
    return await _forward(
        gateway.get_person_tv_credits(pid, ctx=ctx),
        'person', 'person TV credits', pid)


@router.get('/person/{person_id}/combined_credits', tags=['people'], responses=_ERROR_RESPONSES)
async def person_combined_credits(
    person_id: str,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    pid = parse_resource_id(person_id, 'Person')
    return await _forward(
        gateway.get_person_combined_credits(pid, ctx=ctx),
        'person', 'person combined credits', pid)


# --- trending ------------------------------------------------------------

@router.get('/trending/{media_type}/{time_window}', tags=['trending'], responses=_ERROR_RESPONSES)
async def trending(
    media_type: str,
    time_window: str,
    page: Optional[str] = None,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
):
    if media_type not in ('movie', 'tv'):
        raise MalformedRequestError(
            'media_type', 'Media type must be one of: movie, tv',
            error_kind='invalid_parameter')
    return await _forward(
        gateway.get_trending(media_type, time_window, parse_lenient_page(page), ctx=ctx),
        'search', f"trending {media_type}")
