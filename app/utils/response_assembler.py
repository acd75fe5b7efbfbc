from ..schemas.media_schemas import UnifiedPage
from ..schemas.search_schemas import ErrorResponse, SearchRequest, SearchResponse


def build_search_response(
    request: SearchRequest,
    page: UnifiedPage
) -> SearchResponse:
    """
    Echo the normalized request and carry the upstream pagination and the
    unified results through unchanged.
    """
    return SearchResponse(
        query=request.query,
        type=request.resource_type,
        page=page.page,
        total_pages=page.total_pages,
        total_results=page.total_results,
        results=page.results,
        language=request.language,
    )


def build_error_response(kind: str, message: str, code: int) -> ErrorResponse:
    return ErrorResponse(error=kind, message=message, code=code)
