import base64
import io
import logging
from typing import BinaryIO, Callable, Dict, Mapping, Optional, Union

import httpx

from restclient.config import ClientConfig
from restclient.error import InvalidHeaderError, InvalidURLError, RequestFailedError
from restclient.response import Response

logger = logging.getLogger(__name__)

BodyWriter = Callable[[BinaryIO], None]
"""A body writer receives the sink of the request body and writes the
content to send into it."""

JSON_CONTENT_TYPE = "application/json"

_BODY_METHODS = ("POST", "PUT")


def request_to(
    url: Union[str, httpx.URL],
    config: Optional[ClientConfig] = None,
    *,
    client: Optional[httpx.Client] = None,
) -> "RequestBuilder":
    """Start a request to the specified URL.

    Args:
        url: Absolute http(s) URL of the requested resource.
        config: Transport configuration. Read from the environment by
          default (see ClientConfig.from_environment).
        client: Optional httpx.Client to send the request with. The caller
          keeps ownership of it; config is ignored when it is given.

    Returns:
        A RequestBuilder to specify the request with.

    Raises:
        InvalidURLError: if url is not a valid absolute http(s) URL.
    """
    return RequestBuilder(_parse_url(url), config, client)


def _parse_url(url: Union[str, httpx.URL]) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidURLError(f"invalid URL '{url}': {e}") from e

    if not parsed.is_absolute_url:
        raise InvalidURLError(f"invalid URL '{url}': no scheme")
    match parsed.scheme:
        case "http" | "https":
            pass
        case _:
            raise InvalidURLError(f"invalid URL '{url}': unsupported scheme")
    if not parsed.host:
        raise InvalidURLError(f"invalid URL '{url}': no host")
    return parsed


class RequestBuilder:
    """Builder for fluently specifying and sending a request.

    Header setters overwrite earlier values of the same header. Header names
    are stored as given, without case normalization.
    """

    def __init__(
        self,
        url: httpx.URL,
        config: Optional[ClientConfig] = None,
        client: Optional[httpx.Client] = None,
    ):
        self._url = url
        self._config = config
        self._client = client
        self._headers: Dict[str, str] = {}

    @property
    def url(self) -> httpx.URL:
        return self._url

    @property
    def headers(self) -> Mapping[str, str]:
        return dict(self._headers)

    def basic_auth(self, username: str, password: str) -> "RequestBuilder":
        """Authenticate with HTTP basic authentication."""
        credentials = f"{username}:{password}".encode()
        return self.auth("Basic " + base64.b64encode(credentials).decode("ascii"))

    def auth(self, token: str) -> "RequestBuilder":
        """Set the Authorization header to token, verbatim."""
        return self.add_header("Authorization", token)

    def accept_json(self) -> "RequestBuilder":
        return self.accept(JSON_CONTENT_TYPE)

    def accept(self, content_type: str) -> "RequestBuilder":
        return self.add_header("Accept", content_type)

    def send_json(self) -> "RequestBuilder":
        return self.content_type(JSON_CONTENT_TYPE)

    def content_type(self, content_type: str) -> "RequestBuilder":
        return self.add_header("Content-Type", content_type)

    def add_header(self, name: str, value: str) -> "RequestBuilder":
        """Set a request header.

        Raises:
            InvalidHeaderError: if name is not ASCII or value is not
              ISO-8859-1 encodable.
        """
        try:
            name.encode("ascii")
            value.encode("latin-1")
        except UnicodeEncodeError as e:
            raise InvalidHeaderError(f"cannot send header '{name}': {e}") from e
        self._headers[name] = value
        return self

    def get(self) -> Response:
        return self._send("GET")

    def head(self) -> Response:
        return self._send("HEAD")

    def delete(self) -> Response:
        return self._send("DELETE")

    def post(self, writer: Optional[BodyWriter] = None) -> Response:
        """Send a POST request.

        Args:
            writer: Writes the request body into the sink it is given.
        """
        return self._send("POST", writer)

    def put(self, writer: Optional[BodyWriter] = None) -> Response:
        """Send a PUT request.

        Args:
            writer: Writes the request body into the sink it is given.
        """
        return self._send("PUT", writer)

    def _send(self, method: str, writer: Optional[BodyWriter] = None) -> Response:
        content = None
        if writer is not None and method in _BODY_METHODS:
            content = _write_body(writer)

        owned = self._client is None
        if owned:
            config = self._config or ClientConfig.from_environment()
            client = config.build_client()
        else:
            client = self._client

        logger.debug("sending %s %s", method, self._url)
        try:
            request = client.build_request(
                method,
                self._url,
                headers=_encode_headers(self._headers),
                content=content,
            )
            response = client.send(request, stream=True)
        except httpx.HTTPError as e:
            if owned:
                client.close()
            raise RequestFailedError(f"{method} {self._url} failed: {e}") from e
        except BaseException:
            if owned:
                client.close()
            raise

        logger.debug(
            "received %d %s for %s %s",
            response.status_code,
            response.reason_phrase,
            method,
            self._url,
        )
        return Response(response, client if owned else None)


def _write_body(writer: BodyWriter) -> bytes:
    # The sink is closed on every exit path, so getvalue() is taken inside
    # the with block.
    try:
        with io.BytesIO() as sink:
            writer(sink)
            sink.flush()
            return sink.getvalue()
    except OSError as e:
        raise RequestFailedError(f"failed to write request body: {e}") from e


def _encode_headers(headers: Mapping[str, str]) -> Dict[str, bytes]:
    # httpx encodes str values as ASCII; values are sent as ISO-8859-1.
    return {name: value.encode("latin-1") for name, value in headers.items()}
