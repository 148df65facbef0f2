import pytest

from pricecheck.errors import (
    CategoryFetchError,
    FetchError,
    MissingTokenError,
    RateLimitedError,
    RequestError,
    UnexpectedResponseError,
)


def test_missing_token_message():
    assert str(MissingTokenError()) == "Missing authentication token"


def test_request_error_message_contains_detail():
    err = RequestError("connection reset")
    assert str(err).startswith("HTTP request failed: ")
    assert str(err).endswith("connection reset")
    assert err.detail == "connection reset"


def test_category_fetch_error_fields_and_message():
    err = CategoryFetchError("dairy", 503)
    assert err.category == "dairy"
    assert err.status == 503
    assert str(err) == "Failed to fetch category 'dairy': HTTP 503"


def test_unexpected_response_message():
    err = UnexpectedResponseError("no products key")
    assert str(err).startswith("Unexpected API response: ")
    assert "no products key" in str(err)


def test_rate_limited_message():
    err = RateLimitedError(429)
    assert err.status == 429
    assert str(err) == "Rate limited by API (HTTP 429) - too many requests"


@pytest.mark.parametrize(
    "error",
    [
        RequestError("x"),
        CategoryFetchError("bakery", 500),
        UnexpectedResponseError("y"),
        MissingTokenError(),
        RateLimitedError(429),
    ],
)
def test_all_errors_are_fetch_errors(error):
    with pytest.raises(FetchError) as info:
        raise error
    assert info.value is error