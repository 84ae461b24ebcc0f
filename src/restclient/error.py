class RestClientError(Exception):
    """Base class for REST client exceptions."""


class InvalidURLError(RestClientError, ValueError):
    """The target of a request is not a valid absolute http(s) URL."""


class RequestFailedError(RestClientError, ConnectionError):
    """The request could not be sent, or the response could not be received.

    The underlying transport error is always chained as __cause__."""


class InvalidStatusError(RestClientError):
    """The server answered with a status code that the caller did not
    accept."""

    status_code: int
    message: str

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Server returned {status_code} {message}")


class ParseFailedError(RestClientError, ValueError):
    """An entity reader could not deserialize the response body."""


class BodyConsumedError(RestClientError, RuntimeError):
    """The response body was already claimed by another accessor."""


class InvalidHeaderError(RestClientError, ValueError):
    """A header name or value cannot be sent on the wire (names must be
    ASCII, values ISO-8859-1)."""
