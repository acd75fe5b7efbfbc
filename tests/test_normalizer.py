import pytest
from pydantic import ValidationError

from app.utils.errors import MalformedRequestError, QueryValidationError
from app.utils.normalizer import (
    normalize_search_params,
    parse_lenient_page,
    parse_resource_id,
)


def test_defaults_are_applied_when_only_query_given():
    req = normalize_search_params({"query": "Fight Club"})
    assert req.query == "Fight Club"
    assert req.resource_type == "all"
    assert req.page == 1
    assert req.language == "ja-JP"
    assert req.year is None


def test_query_and_type_are_trimmed_and_type_lower_cased():
    req = normalize_search_params(
        {"query": "  Dune  ", "type": "  MOVIE ", "language": " en-US "})
    assert req.query == "Dune"
    assert req.resource_type == "movie"
    assert req.language == "en-US"


def test_explicit_values_are_kept():
    req = normalize_search_params(
        {"query": "x", "type": "person", "page": "3", "year": "1999"})
    assert req.resource_type == "person"
    assert req.page == 3
    assert req.year == 1999


@pytest.mark.parametrize("query", ["", "   ", None])
def test_empty_query_is_a_validation_error(query):
    params = {} if query is None else {"query": query}
    with pytest.raises(QueryValidationError) as exc:
        normalize_search_params(params)
    assert exc.value.field == "query"
    assert exc.value.http_status == 400


def test_unknown_type_is_rejected():
    with pytest.raises(QueryValidationError) as exc:
        normalize_search_params({"query": "x", "type": "collection"})
    assert exc.value.field == "type"


@pytest.mark.parametrize("page", ["0", "-2", "abc", "1.5"])
def test_bad_page_is_malformed_not_validation(page):
    with pytest.raises(MalformedRequestError) as exc:
        normalize_search_params({"query": "x", "page": page})
    assert not isinstance(exc.value, QueryValidationError)
    assert exc.value.field == "page"
    assert exc.value.error_kind == "invalid_request"


@pytest.mark.parametrize("year", ["1800", "1899", "2101", "nineteen"])
def test_bad_year_is_malformed(year):
    with pytest.raises(MalformedRequestError) as exc:
        normalize_search_params({"query": "x", "year": year})
    assert exc.value.field == "year"


@pytest.mark.parametrize("year", ["1900", "2100"])
def test_year_bounds_are_inclusive(year):
    assert normalize_search_params({"query": "x", "year": year}).year == int(year)


def test_malformed_page_is_reported_even_without_query():
    with pytest.raises(MalformedRequestError):
        normalize_search_params({"page": "0"})


def test_normalized_request_is_immutable():
    req = normalize_search_params({"query": "x"})
    with pytest.raises(ValidationError):
        req.page = 5


def test_normalization_is_deterministic():
    params = {"query": "Alien", "type": "tv", "page": "2"}
    assert normalize_search_params(params) == normalize_search_params(params)


def test_parse_resource_id():
    assert parse_resource_id("550", "Movie") == 550
    for raw in ("0", "-1", "abc", ""):
        with pytest.raises(MalformedRequestError) as exc:
            parse_resource_id(raw, "Movie")
        assert exc.value.error_kind == "invalid_parameter"
        assert exc.value.message == "Movie ID must be a positive integer"


@pytest.mark.parametrize("raw", ["1_0", " 2", "3 ", "٣", "0x10", "+"])
def test_only_plain_ascii_integers_are_accepted(raw):
    with pytest.raises(MalformedRequestError) as exc:
        normalize_search_params({"query": "x", "page": raw})
    assert exc.value.field == "page"
    with pytest.raises(MalformedRequestError):
        parse_resource_id(raw, "Movie")
    assert parse_lenient_page(raw) == 1


def test_signed_integers_are_accepted():
    assert normalize_search_params({"query": "x", "page": "+2"}).page == 2
    assert parse_resource_id("+550", "Movie") == 550


def test_parse_lenient_page_falls_back_to_first_page():
    assert parse_lenient_page(None) == 1
    assert parse_lenient_page("4") == 4
    assert parse_lenient_page("0") == 1
    assert parse_lenient_page("oops") == 1
