"""
Turns loosely-typed query parameters into a validated, defaulted
:class:`SearchRequest`.

Optional parameters that are present but unusable (``page``, ``year``) are
malformed-request errors; missing or illegal required input (``query``,
``type``) are validation errors. Both are raised before any upstream call.
"""
import re
from typing import Mapping, Optional
from ..schemas.search_schemas import RESOURCE_TYPES, SearchRequest
from .errors import MalformedRequestError, QueryValidationError

DEFAULT_RESOURCE_TYPE = 'all'
DEFAULT_PAGE = 1
DEFAULT_LANGUAGE = 'ja-JP'
MIN_YEAR = 1900
MAX_YEAR = 2100

# Optional sign and ASCII digits only: no whitespace, underscores or
# non-ASCII digits, all of which int() would accept.
_INT_PATTERN = re.compile(r'[+-]?[0-9]+')


def _parse_int(raw: str) -> Optional[int]:
    if not _INT_PATTERN.fullmatch(raw):
        return None
    return int(raw)


def normalize_search_params(params: Mapping[str, str]) -> SearchRequest:
    """
    Parse, validate and default raw search parameters.

    :param params: raw string-keyed query parameters.
    :return: an immutable SearchRequest with every field set.
    :raises MalformedRequestError: ``page`` or ``year`` cannot be used.
    :raises QueryValidationError: ``query`` is empty or ``type`` is unknown.
    """
    query = (params.get('query') or '').strip()
    resource_type = (params.get('type') or '').strip().lower()
    language = (params.get('language') or '').strip()

    page = 0
    raw_page = params.get('page')
    if raw_page:
        page = _parse_int(raw_page)
        if page is None or page < 1:
            raise MalformedRequestError(
                'page', 'invalid page parameter: must be a positive integer')

    year = None
    raw_year = params.get('year')
    if raw_year:
        year = _parse_int(raw_year)
        if year is None or not MIN_YEAR <= year <= MAX_YEAR:
            raise MalformedRequestError(
                'year',
                f"invalid year parameter: must be between {MIN_YEAR} and {MAX_YEAR}")

    if not query:
        raise QueryValidationError('query', 'Query parameter is required')
    # Unknown types are rejected rather than redirected to combined search.
    if resource_type and resource_type not in RESOURCE_TYPES:
        raise QueryValidationError(
            'type', f"Type must be one of: {', '.join(RESOURCE_TYPES)}")

    return SearchRequest(
        query=query,
        resource_type=resource_type or DEFAULT_RESOURCE_TYPE,
        page=page if page > 0 else DEFAULT_PAGE,
        language=language or DEFAULT_LANGUAGE,
        year=year,
    )


def parse_resource_id(raw: str, label: str) -> int:
    """
    Parse a path identifier such as a movie ID.

    :raises MalformedRequestError: the value is not a positive integer.
    """
    resource_id = _parse_int(raw or '')
    if resource_id is None or resource_id <= 0:
        raise MalformedRequestError(
            'id',
            f"{label} ID must be a positive integer",
            error_kind='invalid_parameter',
        )
    return resource_id


def parse_lenient_page(raw: Optional[str]) -> int:
    """Page parameter of list endpoints; unusable values fall back to 1."""
    if not raw:
        return DEFAULT_PAGE
    page = _parse_int(raw)
    if page is None or page < 1:
        return DEFAULT_PAGE
    return page
