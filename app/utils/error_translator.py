from typing import Literal, Optional
from .errors import DomainError, UpstreamError

ResourceContext = Literal['movie', 'tv', 'person', 'search']

_NOT_FOUND = {
    'movie': ('movie_not_found', 'Movie'),
    'tv': ('tv_not_found', 'TV show'),
    'person': ('person_not_found', 'Person'),
}


def translate_error(
    exc: Exception,
    context: ResourceContext,
    resource_id: Optional[int] = None,
    action: Optional[str] = None
) -> DomainError:
    """
    Map an upstream failure to the error the client sees.

    The same upstream status means different things depending on which
    operation made the call, so ``context`` decides the domain kind. Only
    an UpstreamError carries a status; transport, decode and cancellation
    failures always become the generic 500 kind.

    :param exc: failure raised while talking to the provider.
    :param context: movie, tv, person or search.
    :param resource_id: ID of the looked-up resource, for the message.
    :param action: what was being fetched, e.g. ``movie credits``.
    :return: DomainError with kind, HTTP status and a client-safe message.
    """
    if (isinstance(exc, UpstreamError) and exc.status_code == 404
            and context in _NOT_FOUND):
        kind, label = _NOT_FOUND[context]
        if resource_id is not None:
            message = f"{label} with ID {resource_id} not found"
        else:
            message = f"{label} not found"
        return DomainError(kind, 404, message, cause=exc)

    if context == 'search':
        message = f"Failed to retrieve {action}" if action else 'Failed to perform search'
        return DomainError('search_error', 500, message, cause=exc)

    message = f"Failed to retrieve {action}" if action else f"Failed to retrieve {context} data"
    return DomainError('api_error', 500, message, cause=exc)
