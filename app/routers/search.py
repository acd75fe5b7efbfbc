from typing import Dict
from fastapi import APIRouter, Depends, Request
from starlette.datastructures import QueryParams
from ..clients.search_client import search_media
from ..clients.tmdb_client import TMDBClient
from ..deps import get_call_context, get_gateway
from ..schemas.search_schemas import ErrorResponse, SearchResponse
from ..utils.call_context import CallContext
from ..utils.error_translator import translate_error
from ..utils.errors import UPSTREAM_FAILURES
from ..utils.logging import get_logger
from ..utils.normalizer import normalize_search_params
from ..utils.response_assembler import build_search_response

logger = get_logger(__name__)

router = APIRouter(tags=['search'])


def _first_values(query_params: QueryParams) -> Dict[str, str]:
    # Repeated keys: the first occurrence wins.
    return {key: query_params.getlist(key)[0] for key in query_params.keys()}


@router.get(
    '/search',
    response_model=SearchResponse,
    responses={
        400: {'model': ErrorResponse},
        405: {'model': ErrorResponse},
        500: {'model': ErrorResponse},
    },
)
async def search(
    request: Request,
    gateway: TMDBClient = Depends(get_gateway),
    ctx: CallContext = Depends(get_call_context),
) -> SearchResponse:
    """
    Search movies, TV shows and people.

    Query parameters: ``query`` (required), ``type`` (movie, tv, person or
    all), ``page``, ``language`` and ``year`` (movie searches only).
    """
    search_request = normalize_search_params(_first_values(request.query_params))
    logger.info(
        'search_request',
        query=search_request.query,
        type=search_request.resource_type,
        page=search_request.page,
        language=search_request.language,
    )

    try:
        page = await search_media(gateway, search_request, ctx)
    except UPSTREAM_FAILURES as exc:
        raise translate_error(exc, 'search') from exc

    response = build_search_response(search_request, page)
    logger.info(
        'search_completed',
        results=len(response.results),
        page=response.page,
        total_pages=response.total_pages,
    )
    return response
