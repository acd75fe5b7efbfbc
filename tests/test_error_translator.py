import pytest

from app.utils.error_translator import translate_error
from app.utils.errors import (
    GatewayDecodeError,
    UpstreamCancelledError,
    UpstreamError,
    UpstreamTransportError,
)


@pytest.mark.parametrize("context, kind, message", [
    ("movie", "movie_not_found", "Movie with ID 7 not found"),
    ("tv", "tv_not_found", "TV show with ID 7 not found"),
    ("person", "person_not_found", "Person with ID 7 not found"),
])
def test_404_is_resource_specific(context, kind, message):
    err = translate_error(UpstreamError(404, "not found"), context, resource_id=7)
    assert err.kind == kind
    assert err.http_status == 404
    assert err.message == message


def test_same_status_different_context_gives_different_kind():
    upstream = UpstreamError(404, "The resource you requested could not be found.")
    assert translate_error(upstream, "movie").kind == "movie_not_found"
    assert translate_error(upstream, "person").kind == "person_not_found"


def test_404_during_search_is_a_search_error():
    err = translate_error(UpstreamError(404, "nope"), "search")
    assert (err.kind, err.http_status) == ("search_error", 500)
    assert err.message == "Failed to perform search"


@pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
def test_other_upstream_statuses_are_generic(status):
    err = translate_error(UpstreamError(status, "boom"), "movie",
                          resource_id=1, action="movie details")
    assert (err.kind, err.http_status) == ("api_error", 500)
    assert err.message == "Failed to retrieve movie details"


@pytest.mark.parametrize("exc", [
    GatewayDecodeError(),
    UpstreamTransportError(),
    UpstreamCancelledError(),
])
@pytest.mark.parametrize("context", ["movie", "tv", "person"])
def test_failures_without_upstream_status_are_never_not_found(exc, context):
    err = translate_error(exc, context)
    assert (err.kind, err.http_status) == ("api_error", 500)


def test_transport_failure_during_search():
    err = translate_error(UpstreamTransportError("refused"), "search")
    assert (err.kind, err.http_status) == ("search_error", 500)


def test_raw_upstream_body_is_not_exposed():
    upstream = UpstreamError(500, "<html>internal stack trace</html>")
    err = translate_error(upstream, "tv", action="TV show credits")
    assert "stack trace" not in err.message
    assert err.cause is upstream
