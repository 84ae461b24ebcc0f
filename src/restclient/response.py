import io
import logging
import os
import re
from typing import BinaryIO, Callable, Iterator, Optional, Type, TypeVar

import httpx

from restclient.error import (
    BodyConsumedError,
    InvalidStatusError,
    ParseFailedError,
    RequestFailedError,
)
from restclient.reader import find_entity_reader

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_VALID_STATUS_CODES = (200, 201, 204)
"""Status codes accepted by the body accessors when none are given."""

DEFAULT_CONTENT_TYPE = "*/*"

BUFFER_SIZE = 8192

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class Response:
    """Handle on a completed HTTP exchange.

    The body is streamed from the server and can be claimed by exactly one
    of the accessors (as_input_stream, as_string, as_bytes or as_entity).
    Reading it releases the connection; close() releases it without reading.
    """

    def __init__(
        self, response: httpx.Response, client: Optional[httpx.Client] = None
    ):
        """Initialize a response.

        Args:
            response: The httpx response, sent with stream=True.
            client: Transport owned by this response. It is closed together
              with the response.
        """
        self._response = response
        self._client = client
        self._consumed = False
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return f"<Response [{self.status_code} {self.message}]>"

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def message(self) -> str:
        """The reason phrase sent by the server."""
        return self._response.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def content_type(self) -> str:
        """The Content-Type of the body, */* when the server did not send
        one."""
        return self._response.headers.get("Content-Type", DEFAULT_CONTENT_TYPE)

    def has_valid_response_code(self, *valid_codes: int) -> bool:
        """Returns whether the status code is one of valid_codes."""
        return self.status_code in valid_codes

    def as_input_stream(self, *valid_codes: int) -> BinaryIO:
        """Returns the body as a binary stream.

        The connection is released when the stream is closed.

        Args:
            valid_codes: Status codes for which the response is considered
              valid. Defaults to DEFAULT_VALID_STATUS_CODES.

        Raises:
            InvalidStatusError: if the status code is not valid.
            BodyConsumedError: if the body was already read.
        """
        self._validate_response_code(valid_codes)
        return self._open_body()

    def as_string(self, *valid_codes: int) -> str:
        """Returns the body as text.

        The body is decoded with the charset announced by the server (UTF-8
        by default) and its lines are joined with the platform line
        separator, so line endings are not preserved byte for byte. Bytes
        that are invalid in the charset are replaced with U+FFFD.

        Raises:
            InvalidStatusError: if the status code is not valid.
            BodyConsumedError: if the body was already read.
        """
        self._validate_response_code(valid_codes)
        with self._open_body() as stream:
            data = stream.read()
        text = data.decode(self._response.encoding or "utf-8", errors="replace")

        lines = _LINE_BREAK.split(text)
        if lines[-1] == "":
            lines.pop()
        return os.linesep.join(lines)

    def as_bytes(self, *valid_codes: int) -> bytes:
        """Returns the body as bytes.

        Raises:
            InvalidStatusError: if the status code is not valid.
            BodyConsumedError: if the body was already read.
        """
        self._validate_response_code(valid_codes)
        with self._open_body() as stream, io.BytesIO() as out:
            while True:
                chunk = stream.read(BUFFER_SIZE)
                if not chunk:
                    break
                out.write(chunk)
            return out.getvalue()

    def as_entity(self, target_type: Type[T], *valid_codes: int) -> Optional[T]:
        """Reads the body into an instance of target_type.

        The body is handed to the first registered EntityReader supporting
        the target type and the content type of the response (see
        restclient.reader.register_entity_reader).

        Args:
            target_type: The type to produce.
            valid_codes: Status codes for which the response is considered
              valid. Defaults to DEFAULT_VALID_STATUS_CODES.

        Returns:
            The entity, or None if no registered reader supports the
            combination. In that case the body is left unread.

        Raises:
            InvalidStatusError: if the status code is not valid.
            BodyConsumedError: if the body was already read.
            Exception: whatever the selected reader raises, typically
              ParseFailedError.
        """
        self._validate_response_code(valid_codes)
        content_type = self.content_type
        reader = find_entity_reader(target_type, content_type)
        if reader is None:
            logger.debug(
                "no entity reader for %r with content type %s",
                target_type,
                content_type,
            )
            return None

        with self._open_body() as stream:
            entity = reader.read(target_type, content_type, stream)
        if entity is None:
            raise ParseFailedError(
                f"{type(reader).__qualname__} returned no {target_type!r}"
            )
        return entity

    def close(self):
        """Release the connection without reading the body."""
        if self._closed:
            return
        self._closed = True
        try:
            self._response.close()
        finally:
            if self._client is not None:
                self._client.close()

    def _validate_response_code(self, valid_codes):
        if self.has_valid_response_code(*(valid_codes or DEFAULT_VALID_STATUS_CODES)):
            return
        self._consumed = True
        self.close()
        raise InvalidStatusError(self.status_code, self.message)

    def _open_body(self) -> BinaryIO:
        if self._consumed:
            raise BodyConsumedError("response body was already read")
        if self._closed:
            raise BodyConsumedError("response was closed")
        self._consumed = True
        raw = _BodyStream(self._response.iter_bytes(), self.close)
        return io.BufferedReader(raw, BUFFER_SIZE)


class _BodyStream(io.RawIOBase):
    """Forward-only raw stream over the chunks of a response body."""

    def __init__(self, chunks: Iterator[bytes], on_close: Callable[[], None]):
        self._chunks = chunks
        self._pending = b""
        self._on_close = on_close

    def readable(self):
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except httpx.TransportError as e:
                raise RequestFailedError(f"failed to read response body: {e}") from e

        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def close(self):
        if self.closed:
            return
        try:
            self._on_close()
        finally:
            super().close()
