"""
Unification of the resource-specific search responses into one list of
:data:`UnifiedResult` records.

Type-specific search endpoints do not tag their items, so the tag is taken
from the call context. The combined endpoint tags every item itself.
Pagination is always copied from the upstream page as-is.
"""
from typing import Any, Dict, List, Optional
from pydantic import TypeAdapter, ValidationError
from ..schemas.media_schemas import (
    MEDIA_TYPES,
    Movie,
    MovieResult,
    MultiSearchPage,
    NativeRecord,
    Page,
    Person,
    PersonResult,
    TVResult,
    TVShow,
    UnifiedPage,
    UnifiedResult,
)
from .errors import GatewayDecodeError
from .logging import get_logger

logger = get_logger(__name__)

_VARIANTS = {
    'movie': (Movie, MovieResult),
    'tv': (TVShow, TVResult),
    'person': (Person, PersonResult),
}

_unified_adapter = TypeAdapter(UnifiedResult)


def unify(record: NativeRecord, media_type: str) -> UnifiedResult:
    """
    Tag a native record with ``media_type``.

    Every field of the native shape is copied; the result carries no field
    of any other variant.

    :raises ValueError: ``media_type`` is not movie, tv or person.
    :raises TypeError: ``record`` is not the native shape of ``media_type``.
    """
    if media_type not in _VARIANTS:
        raise ValueError(f"unsupported media type: {media_type}")
    native_cls, result_cls = _VARIANTS[media_type]
    if not isinstance(record, native_cls):
        raise TypeError(
            f"{type(record).__name__} cannot be unified as {media_type}")

    fields = {name: getattr(record, name) for name in native_cls.model_fields}
    return result_cls.model_validate({**fields, 'media_type': media_type})


def unify_page(page: Page, media_type: str) -> UnifiedPage:
    """Re-tag every item of a type-specific search page."""
    return UnifiedPage(
        page=page.page,
        results=[unify(item, media_type) for item in page.results],
        total_pages=page.total_pages,
        total_results=page.total_results,
    )


def _unify_tagged_item(item: Dict[str, Any]) -> Optional[UnifiedResult]:
    media_type = item.get('media_type')
    if media_type not in MEDIA_TYPES:
        logger.debug('multi_search_item_skipped',
                     media_type=media_type, item_id=item.get('id'))
        return None
    try:
        return _unified_adapter.validate_python(item)
    except ValidationError as exc:
        raise GatewayDecodeError(
            f"Malformed {media_type} item in combined search response") from exc


def unify_multi_page(page: MultiSearchPage) -> UnifiedPage:
    """
    Unify a combined search page whose items already carry ``media_type``.
    Items of media types other than movie, tv and person are dropped.
    """
    results: List[UnifiedResult] = []
    for item in page.results:
        unified = _unify_tagged_item(item)
        if unified is not None:
            results.append(unified)
    return UnifiedPage(
        page=page.page,
        results=results,
        total_pages=page.total_pages,
        total_results=page.total_results,
    )
