from typing import Optional
from .tmdb_client import TMDBClient
from ..schemas.media_schemas import UnifiedPage
from ..schemas.search_schemas import SearchRequest
from ..utils.call_context import CallContext
from ..utils.unifier import unify_multi_page, unify_page


async def search_media(
    gateway: TMDBClient,
    request: SearchRequest,
    ctx: Optional[CallContext] = None
) -> UnifiedPage:
    """
    Run a normalized search against the provider and unify the results.

    Exactly one upstream call is made:
    - ``all`` uses the combined endpoint, whose items are already tagged
    - ``movie``, ``tv`` and ``person`` use their own endpoint and every
      item is tagged from the requested type

    :param gateway: TMDB client used for the upstream call.
    :param request: normalized SearchRequest.
    :param ctx: cancellation/deadline of the inbound request.
    :return: UnifiedPage with the upstream pagination untouched.
    """
    rtype = request.resource_type

    if rtype == 'all':
        page = await gateway.search_multi(
            request.query, request.page, request.language, ctx=ctx)
        return unify_multi_page(page)
    elif rtype == 'movie':
        page = await gateway.search_movies(
            request.query, request.page, request.language,
            year=request.year, ctx=ctx)
    elif rtype == 'tv':
        page = await gateway.search_tv(
            request.query, request.page, request.language, ctx=ctx)
    else:
        page = await gateway.search_people(
            request.query, request.page, request.language, ctx=ctx)
    return unify_page(page, rtype)
