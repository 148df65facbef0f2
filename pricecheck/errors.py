"""Errors raised while fetching catalogue data from supermarket APIs."""


class FetchError(Exception):
    """Base class for every fetch failure."""


class RequestError(FetchError):
    """The HTTP request itself failed."""

    def __init__(self, detail):
        self.detail = str(detail)
        super().__init__(f"HTTP request failed: {self.detail}")


class CategoryFetchError(FetchError):
    """A category listing came back with a non-success status."""

    def __init__(self, category, status):
        self.category = category
        self.status = int(status)
        super().__init__(f"Failed to fetch category '{category}': HTTP {self.status}")


class UnexpectedResponseError(FetchError):
    """The API answered with something that could not be understood."""

    def __init__(self, detail):
        self.detail = str(detail)
        super().__init__(f"Unexpected API response: {self.detail}")


class MissingTokenError(FetchError):
    """No authentication token was available for the API."""

    def __init__(self):
        super().__init__("Missing authentication token")


class RateLimitedError(FetchError):
    """The API refused the request because too many were made."""

    def __init__(self, status):
        self.status = int(status)
        super().__init__(
            f"Rate limited by API (HTTP {self.status}) - too many requests"
        )