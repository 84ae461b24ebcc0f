import os
from dataclasses import dataclass
from typing import BinaryIO, Type, TypeVar, Union

import httpx
import pytest

from restclient.error import (
    BodyConsumedError,
    InvalidStatusError,
    ParseFailedError,
    RequestFailedError,
)
from restclient.reader import EntityReader, register_entity_reader
from restclient.request import request_to
from restclient.response import DEFAULT_VALID_STATUS_CODES, Response

T = TypeVar("T")


@dataclass
class CustomEntity:
    body: str


class NoneReader(EntityReader):
    def supports(self, target_type: type, content_type: str) -> bool:
        return content_type == "application/none"

    def read(
        self, target_type: Type[T], content_type: str, data: Union[BinaryIO, bytes]
    ) -> T:
        return None  # type: ignore[return-value]


class FailingStream(httpx.SyncByteStream):
    def __iter__(self):
        yield b"partial"
        raise httpx.ReadError("connection reset")


def get(*args, **kwargs) -> Response:
    client = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(*args, **kwargs))
    )
    return request_to("http://example.com/resource", client=client).get()


def test_status_and_message():
    response = get(201)

    assert response.status_code == 201
    assert response.message == "Created"
    assert repr(response) == "<Response [201 Created]>"


def test_content_type():
    assert get(200, headers={"Content-Type": "text/xml"}).content_type == "text/xml"
    assert get(200).content_type == "*/*"


def test_default_valid_codes():
    assert DEFAULT_VALID_STATUS_CODES == (200, 201, 204)
    for code in DEFAULT_VALID_STATUS_CODES:
        get(code).as_bytes()


@pytest.mark.parametrize(
    "accessor", ["as_input_stream", "as_string", "as_bytes"]
)
def test_invalid_status(accessor):
    response = get(500, content=b"oops")

    with pytest.raises(InvalidStatusError) as exc_info:
        getattr(response, accessor)()

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Internal Server Error"


def test_invalid_status_releases_body():
    response = get(500, content=b"oops")

    with pytest.raises(InvalidStatusError):
        response.as_string(200)
    with pytest.raises(BodyConsumedError):
        response.as_string(500)


def test_explicit_codes_replace_defaults():
    with pytest.raises(InvalidStatusError):
        get(200, content=b"").as_bytes(201)


def test_as_string_joins_lines_with_platform_separator():
    response = get(200, content=b"one\r\ntwo\nthree\rfour\n")

    assert response.as_string() == os.linesep.join(["one", "two", "three", "four"])


def test_as_string_empty_body():
    assert get(204).as_string() == ""


def test_as_string_uses_response_charset():
    response = get(
        200,
        headers={"Content-Type": "text/plain; charset=iso-8859-1"},
        content="grüezi".encode("iso-8859-1"),
    )

    assert response.as_string() == "grüezi"


def test_as_string_replaces_undecodable_bytes():
    response = get(200, content=b"ok \xff\xfe bad")

    assert response.as_string() == "ok \ufffd\ufffd bad"


def test_as_input_stream_closes_response():
    response = get(200, content=b"streamed")

    stream = response.as_input_stream()
    assert stream.read(3) == b"str"
    assert stream.read() == b"eamed"
    stream.close()

    with pytest.raises(BodyConsumedError):
        response.as_bytes()


def test_closed_response_cannot_be_read():
    response = get(200, content=b"data")
    response.close()
    response.close()

    with pytest.raises(BodyConsumedError):
        response.as_bytes()


def test_read_failure():
    response = get(200, stream=FailingStream())

    with pytest.raises(RequestFailedError) as exc_info:
        response.as_bytes()
    assert isinstance(exc_info.value.__cause__, httpx.ReadError)


def test_as_entity():
    response = get(
        200,
        headers={"Content-Type": "application/xml"},
        content=b"<CustomEntity><body>Some content</body></CustomEntity>",
    )

    assert response.as_entity(CustomEntity) == CustomEntity(body="Some content")


def test_as_entity_without_content_type():
    response = get(200, content=b"<CustomEntity/>")

    assert response.as_entity(CustomEntity) is None


def test_as_entity_invalid_status():
    response = get(404, headers={"Content-Type": "application/xml"}, content=b"<x/>")

    with pytest.raises(InvalidStatusError):
        response.as_entity(CustomEntity)


def test_as_entity_propagates_parse_failure():
    response = get(200, headers={"Content-Type": "text/xml"}, content=b"<broken")

    with pytest.raises(ParseFailedError):
        response.as_entity(CustomEntity)


def test_as_entity_rejects_none_result():
    register_entity_reader("none", NoneReader())
    response = get(200, headers={"Content-Type": "application/none"}, content=b"")

    with pytest.raises(ParseFailedError):
        response.as_entity(CustomEntity)


def test_owned_client_closed_with_response():
    client = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200))
    )
    request = client.build_request("GET", "http://x")
    response = Response(client.send(request, stream=True), client)

    response.close()

    assert client.is_closed
