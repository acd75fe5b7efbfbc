import asyncio
from typing import AsyncIterator
from fastapi import Request
from .clients.tmdb_client import TMDBClient
from .utils.call_context import CallContext

DISCONNECT_POLL_INTERVAL = 0.25


def get_gateway(request: Request) -> TMDBClient:
    return request.app.state.gateway


async def _watch_disconnect(request: Request, ctx: CallContext) -> None:
    while not ctx.done():
        if await request.is_disconnected():
            ctx.cancel()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


async def get_call_context(request: Request) -> AsyncIterator[CallContext]:
    """
    CallContext of the current request: bounded by ``REQUEST_DEADLINE`` and
    cancelled when the client disconnects.
    """
    settings = request.app.state.settings
    ctx = CallContext.with_timeout(settings.REQUEST_DEADLINE)
    watcher = asyncio.create_task(_watch_disconnect(request, ctx))
    try:
        yield ctx
    finally:
        watcher.cancel()
