"""Support for testing code that uses restclient."""

from .ports import find_available_port, find_available_port_range, is_available
from .server import RecordedRequest, StubServer

__all__ = [
    "RecordedRequest",
    "StubServer",
    "find_available_port",
    "find_available_port_range",
    "is_available",
]
