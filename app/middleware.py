"""
CORS, request logging, preflight passthrough and error rendering.

Middleware is a stack: the last one added runs first. ``create_app`` adds
the request logger last so it sees the final status of every response.
"""
import time
from typing import List

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .utils.errors import (
    DomainError,
    GatewayError,
    MalformedRequestError,
    QueryValidationError,
)
from .utils.logging import get_logger
from .utils.response_assembler import build_error_response

logger = get_logger(__name__)

_HTTP_ERROR_KINDS = {
    404: 'not_found',
    405: 'method_not_allowed',
}


def configure_cors(app: FastAPI, allowed_origins: List[str]) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ['*'],
        allow_credentials=True,
        allow_methods=['GET', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization'],
    )


# Plain ASGI: ``receive`` reaches the route untouched, client disconnects included.

class PreflightMiddleware:
    """Answer bare OPTIONS requests with an empty 200."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] == 'http' and scope['method'] == 'OPTIONS':
            await Response(status_code=200)(scope, receive, send)
            return
        await self.app(scope, receive, send)


class RequestLoggingMiddleware:
    """Log method, path, status code and duration of every request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status = 500

        async def send_with_status(message: Message) -> None:
            nonlocal status
            if message['type'] == 'http.response.start':
                status = message['status']
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        finally:
            logger.info(
                'http_request',
                method=scope['method'],
                path=scope['path'],
                status=status,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )


def _error_json(kind: str, message: str, code: int) -> JSONResponse:
    body = build_error_response(kind, message, code)
    return JSONResponse(status_code=code, content=body.model_dump())


async def _handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    logger.warning(
        'request_failed',
        path=request.url.path,
        kind=exc.kind,
        status=exc.http_status,
        cause=str(exc.cause) if exc.cause else None,
    )
    return _error_json(exc.kind, exc.message, exc.http_status)


async def _handle_local_error(request: Request, exc: GatewayError) -> JSONResponse:
    if isinstance(exc, (QueryValidationError, MalformedRequestError)):
        logger.info('request_rejected', path=request.url.path,
                    field=exc.field, message=exc.message)
        return _error_json(exc.error_kind, exc.message, exc.http_status)
    # Upstream failures that escaped translation.
    logger.error('unhandled_gateway_error', path=request.url.path,
                 error_type=type(exc).__name__, message=exc.message)
    return _error_json('api_error', 'Internal server error', 500)


async def _handle_http_exception(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    kind = _HTTP_ERROR_KINDS.get(exc.status_code, 'http_error')
    if exc.status_code == 405:
        message = 'Only GET method is allowed'
    else:
        message = str(exc.detail)
    response = _error_json(kind, message, exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _handle_request_validation(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    return _error_json('invalid_request', 'Invalid request parameters', 400)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _handle_domain_error)
    app.add_exception_handler(GatewayError, _handle_local_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
