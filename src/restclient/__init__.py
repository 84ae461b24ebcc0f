"""A minimal fluent HTTP client.

    from restclient import request_to

    response = request_to("https://example.com/resource").accept("text/xml").get()
    text = response.as_string()
"""

import restclient.integrations
from restclient.config import ClientConfig
from restclient.error import (
    BodyConsumedError,
    InvalidHeaderError,
    InvalidStatusError,
    InvalidURLError,
    ParseFailedError,
    RequestFailedError,
    RestClientError,
)
from restclient.reader import (
    EntityReader,
    entity_readers,
    find_entity_reader,
    register_entity_reader,
    unregister_entity_reader,
)
from restclient.request import RequestBuilder, request_to
from restclient.response import DEFAULT_VALID_STATUS_CODES, Response
from restclient.tls import insecure

__all__ = [
    "BodyConsumedError",
    "ClientConfig",
    "DEFAULT_VALID_STATUS_CODES",
    "EntityReader",
    "InvalidHeaderError",
    "InvalidStatusError",
    "InvalidURLError",
    "ParseFailedError",
    "RequestBuilder",
    "RequestFailedError",
    "Response",
    "RestClientError",
    "entity_readers",
    "find_entity_reader",
    "insecure",
    "register_entity_reader",
    "request_to",
    "unregister_entity_reader",
]
