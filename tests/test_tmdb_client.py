import asyncio

import httpx
import pytest
from httpx import Response

from app.clients.tmdb_client import TMDBClient
from app.config import Settings
from app.schemas.media_schemas import MoviePage
from app.utils.call_context import CallContext
from app.utils.errors import (
    GatewayDecodeError,
    MalformedRequestError,
    QueryValidationError,
    UpstreamCancelledError,
    UpstreamError,
    UpstreamTransportError,
)

BASE_URL = "https://api.example.test/3"


class DummyHTTP:
    def __init__(self, responses):
        # responses: dict of url to Response or exception
        self.responses = responses
        self.calls = []

    async def get(self, url, params=None, headers=None):
        self.calls.append({"url": url, "params": dict(params or {}),
                           "headers": dict(headers or {})})
        resp = self.responses.get(url)
        if isinstance(resp, Exception):
            raise resp
        return resp

    async def aclose(self):
        pass


@pytest.fixture
def settings():
    return Settings(TMDB_API_KEY="secret-key", TMDB_BASE_URL=BASE_URL, _env_file=None)


def make_client(settings, responses):
    http = DummyHTTP(responses)
    return TMDBClient(settings, http_client=http), http


# --- request building --------------------------------------------------------

@pytest.mark.asyncio
async def test_api_key_and_headers_are_injected(settings):
    client, http = make_client(settings, {
        f"{BASE_URL}/search/movie": Response(200, json={"results": []}),
    })
    await client.search_movies("Alien", page=2, language="en-US", year=1979)

    call = http.calls[0]
    assert call["params"] == {"query": "Alien", "page": 2, "language": "en-US",
                              "year": 1979, "api_key": "secret-key"}
    assert call["headers"]["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_unset_optional_params_are_not_sent(settings):
    client, http = make_client(settings, {
        f"{BASE_URL}/search/tv": Response(200, json={"results": []}),
    })
    await client.search_tv("Lost", page=0, language="")
    assert http.calls[0]["params"] == {"query": "Lost", "api_key": "secret-key"}


@pytest.mark.asyncio
async def test_search_decodes_into_typed_page(settings):
    client, _ = make_client(settings, {
        f"{BASE_URL}/search/movie": Response(200, json={
            "page": 1, "total_pages": 1, "total_results": 1,
            "results": [{"id": 550, "title": "Fight Club"}],
        }),
    })
    page = await client.search_movies("Fight Club")
    assert isinstance(page, MoviePage)
    assert page.results[0].title == "Fight Club"


@pytest.mark.asyncio
async def test_empty_query_never_reaches_upstream(settings):
    client, http = make_client(settings, {})
    with pytest.raises(QueryValidationError):
        await client.search_multi("   ")
    assert http.calls == []


@pytest.mark.asyncio
async def test_non_positive_id_never_reaches_upstream(settings):
    client, http = make_client(settings, {})
    with pytest.raises(MalformedRequestError):
        await client.get_person_details(0)
    assert http.calls == []


@pytest.mark.asyncio
async def test_detail_payload_is_forwarded_as_is(settings):
    payload = {"id": 550, "title": "Fight Club", "budget": 63000000,
               "belongs_to_collection": None}
    client, _ = make_client(settings, {
        f"{BASE_URL}/movie/550": Response(200, json=payload),
    })
    assert await client.get_movie_details(550) == payload


@pytest.mark.asyncio
async def test_reviews_path_and_page(settings):
    client, http = make_client(settings, {
        f"{BASE_URL}/tv/1396/reviews": Response(200, json={"id": 1396, "results": []}),
    })
    await client.get_tv_reviews(1396, page=3)
    assert http.calls[0]["params"]["page"] == 3


@pytest.mark.asyncio
async def test_trending_unknown_window_falls_back_to_week(settings):
    client, http = make_client(settings, {
        f"{BASE_URL}/trending/movie/week": Response(200, json={"results": []}),
    })
    await client.get_trending("movie", "month")
    assert http.calls[0]["url"] == f"{BASE_URL}/trending/movie/week"


# --- error handling ------------------------------------------------------------

@pytest.mark.asyncio
async def test_structured_error_body_becomes_upstream_error(settings):
    client, _ = make_client(settings, {
        f"{BASE_URL}/movie/999999": Response(404, json={
            "status_code": 34,
            "status_message": "The resource you requested could not be found.",
            "success": False,
        }),
    })
    with pytest.raises(UpstreamError) as exc:
        await client.get_movie_details(999999)
    assert exc.value.status_code == 404
    assert exc.value.message == "The resource you requested could not be found."


@pytest.mark.asyncio
async def test_unstructured_error_body_is_kept_verbatim(settings):
    client, _ = make_client(settings, {
        f"{BASE_URL}/search/multi": Response(502, text="Bad Gateway from edge"),
    })
    with pytest.raises(UpstreamError) as exc:
        await client.search_multi("x")
    assert exc.value.status_code == 502
    assert exc.value.message == "Bad Gateway from edge"


@pytest.mark.asyncio
async def test_malformed_json_on_success_is_decode_error(settings):
    client, _ = make_client(settings, {
        f"{BASE_URL}/search/multi": Response(200, text="{not json"),
    })
    with pytest.raises(GatewayDecodeError):
        await client.search_multi("x")


@pytest.mark.asyncio
async def test_wrong_shape_on_success_is_decode_error(settings):
    client, _ = make_client(settings, {
        f"{BASE_URL}/search/person": Response(200, json={"results": [{"name": "no id"}]}),
    })
    with pytest.raises(GatewayDecodeError):
        await client.search_people("x")


@pytest.mark.asyncio
async def test_non_object_detail_payload_is_decode_error(settings):
    client, _ = make_client(settings, {
        f"{BASE_URL}/person/1": Response(200, json=[1, 2, 3]),
    })
    with pytest.raises(GatewayDecodeError):
        await client.get_person_details(1)


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", [
    httpx.ConnectError("connection refused"),
    httpx.ReadTimeout("too slow"),
])
async def test_transport_failures(settings, exc):
    client, _ = make_client(settings, {f"{BASE_URL}/tv/1": exc})
    with pytest.raises(UpstreamTransportError):
        await client.get_tv_details(1)


# --- cancellation --------------------------------------------------------------

@pytest.mark.asyncio
async def test_cancelled_context_skips_the_network_call(settings):
    client, http = make_client(settings, {
        f"{BASE_URL}/search/multi": Response(200, json={"results": []}),
    })
    ctx = CallContext()
    ctx.cancel()
    with pytest.raises(UpstreamCancelledError):
        await client.search_multi("x", ctx=ctx)
    assert http.calls == []


class SlowHTTP(DummyHTTP):
    def __init__(self):
        super().__init__({})
        self.aborted = False

    async def get(self, url, params=None, headers=None):
        self.calls.append({"url": url})
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.aborted = True
            raise
        return Response(200, json={})


@pytest.mark.asyncio
async def test_cancellation_aborts_pending_call(settings):
    http = SlowHTTP()
    client = TMDBClient(settings, http_client=http)
    ctx = CallContext()

    task = asyncio.ensure_future(client.get_movie_details(1, ctx=ctx))
    await asyncio.sleep(0.01)
    ctx.cancel()
    with pytest.raises(UpstreamCancelledError):
        await task
    await asyncio.sleep(0.01)
    assert http.aborted is True


@pytest.mark.asyncio
async def test_deadline_aborts_pending_call(settings):
    http = SlowHTTP()
    client = TMDBClient(settings, http_client=http)
    ctx = CallContext.with_timeout(0.05)

    with pytest.raises(UpstreamCancelledError):
        await client.get_movie_details(1, ctx=ctx)
    await asyncio.sleep(0.01)
    assert http.aborted is True
