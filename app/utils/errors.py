"""
Exception hierarchy for the media search gateway.

    GatewayError                 (base, carries a client-safe ``message``)
    +-- QueryValidationError     (missing/illegal required input, 400)
    +-- MalformedRequestError    (syntactically wrong optional input, 400)
    +-- UpstreamError            (upstream answered with status >= 400)
    +-- GatewayDecodeError       (upstream said 2xx but the body is unparseable)
    +-- UpstreamTransportError   (connection/timeout, no upstream status seen)
    +-- UpstreamCancelledError   (caller went away or deadline passed)
    +-- DomainError              (translated, client-facing error)
"""
from typing import Optional


class GatewayError(Exception):
    """Base exception for every error raised by the gateway."""

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        self._message = message
        super().__init__(message)

    @property
    def message(self) -> str:
        return self._message


class QueryValidationError(GatewayError):
    """Raised when required input is missing or an enum value is illegal."""

    error_kind = "validation_error"
    http_status = 400

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class MalformedRequestError(GatewayError):
    """Raised when an optional parameter is present but cannot be used."""

    http_status = 400

    def __init__(
        self,
        field: str,
        message: str,
        error_kind: str = "invalid_request",
    ) -> None:
        self.field = field
        self.error_kind = error_kind
        super().__init__(message)


class UpstreamError(GatewayError):
    """
    Error reported by the metadata provider itself.

    :param status_code: HTTP status returned by the provider.
    :param message: provider ``status_message`` or, failing that, the raw body.
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        return f"TMDB API error {self.status_code}: {self.message}"


class GatewayDecodeError(GatewayError):
    """Raised when a successful upstream response cannot be decoded."""

    def __init__(self, message: str = "Failed to parse upstream response") -> None:
        super().__init__(message)


class UpstreamTransportError(GatewayError):
    """Raised when the upstream could not be reached at all."""

    def __init__(self, message: str = "Upstream request failed") -> None:
        super().__init__(message)


class UpstreamCancelledError(GatewayError):
    """Raised when the inbound call was cancelled or ran past its deadline."""

    def __init__(self, message: str = "Upstream request cancelled") -> None:
        super().__init__(message)


class DomainError(GatewayError):
    """Client-facing error with a fixed ``kind`` and outward HTTP status."""

    def __init__(
        self,
        kind: str,
        http_status: int,
        message: str,
        cause: Optional[Exception] = None,
    ) -> None:
        self.kind = kind
        self.http_status = http_status
        self.cause = cause
        super().__init__(message)

    def __repr__(self) -> str:
        return f"DomainError(kind={self.kind!r}, http_status={self.http_status})"


# Failures that originate from talking to the provider; route handlers
# translate these with the resource context of the call.
UPSTREAM_FAILURES = (
    UpstreamError,
    GatewayDecodeError,
    UpstreamTransportError,
    UpstreamCancelledError,
)
