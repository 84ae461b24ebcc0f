"""JSON entity reader.

The reader is not registered by default; import this module to enable it:

    import restclient.integrations.json
"""

import re
from typing import BinaryIO, Type, TypeVar, Union

import pydantic

from restclient.error import ParseFailedError
from restclient.reader import (
    EntityReader,
    as_stream,
    media_type,
    register_entity_reader,
    type_adapter,
)

T = TypeVar("T")

JSON_MEDIA_TYPE = re.compile(r".+/json|.+/[^/]+\+json")


class JsonEntityReader(EntityReader):
    """Reads JSON documents into pydantic models, dataclasses or plain dicts
    and lists."""

    def supports(self, target_type: type, content_type: str) -> bool:
        return JSON_MEDIA_TYPE.fullmatch(media_type(content_type)) is not None

    def read(
        self, target_type: Type[T], content_type: str, data: Union[BinaryIO, bytes]
    ) -> T:
        adapter = type_adapter(target_type)
        try:
            entity = adapter.validate_json(as_stream(data).read())
        except pydantic.ValidationError as e:
            raise ParseFailedError(
                f"cannot read JSON content as {target_type!r}: {e}"
            ) from e
        if entity is None:
            raise ParseFailedError("JSON content is null")
        return entity


register_entity_reader("json", JsonEntityReader())
