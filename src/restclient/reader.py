"""Content-type based deserialization of response bodies."""

import abc
import functools
import io
import logging
from typing import Any, BinaryIO, Dict, List, Optional, Type, TypeVar, Union

import pydantic

from restclient.error import ParseFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityReader(abc.ABC):
    """Converts response bodies of some content types into typed entities."""

    @abc.abstractmethod
    def supports(self, target_type: type, content_type: str) -> bool:
        """Returns whether the reader can produce instances of target_type
        from data of the given content type (e.g. application/json)."""

    @abc.abstractmethod
    def read(
        self, target_type: Type[T], content_type: str, data: Union[BinaryIO, bytes]
    ) -> T:
        """Read data of the given content type into an instance of
        target_type.

        Args:
            target_type: The type to produce.
            content_type: The media type of data.
            data: A binary stream or a bytes buffer holding the content.

        Returns:
            An instance of target_type, never None.

        Raises:
            ParseFailedError: if the content could not be read.
        """


def as_stream(data: Union[BinaryIO, bytes]) -> BinaryIO:
    """Returns data as a binary stream, wrapping bytes buffers."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return io.BytesIO(data)
    return data


def media_type(content_type: str) -> str:
    """Strips parameters (e.g. charset) from a Content-Type value."""
    return content_type.split(";", 1)[0].strip()


_READERS: Dict[str, EntityReader] = {}


def register_entity_reader(name: str, reader: EntityReader):
    """Register an entity reader.

    Readers are consulted in registration order; the first one that supports
    a type and content type is used. Registering a name again replaces the
    reader without changing its position.
    """
    logger.debug("registering entity reader '%s'", name)
    _READERS[name] = reader


def unregister_entity_reader(name: str) -> EntityReader:
    """Remove a registered entity reader.

    Raises:
        KeyError: if no reader is registered under that name.
    """
    return _READERS.pop(name)


def entity_readers() -> List[EntityReader]:
    """Returns the registered readers, in registration order."""
    return list(_READERS.values())


def find_entity_reader(
    target_type: type, content_type: str
) -> Optional[EntityReader]:
    """Returns the first registered reader supporting the combination, or
    None."""
    for reader in entity_readers():
        if reader.supports(target_type, content_type):
            return reader
    return None


@functools.lru_cache(maxsize=None)
def type_adapter(target_type: Any) -> pydantic.TypeAdapter:
    """Returns the pydantic adapter validating values of target_type.

    Raises:
        ParseFailedError: if pydantic cannot validate target_type (e.g. a
          plain class that is neither a model nor a dataclass).
    """
    try:
        return pydantic.TypeAdapter(target_type)
    except pydantic.PydanticSchemaGenerationError as e:
        raise ParseFailedError(f"cannot read content as {target_type!r}: {e}") from e
