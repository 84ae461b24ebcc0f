"""XML entity reader built on xml.etree.ElementTree and pydantic."""

import dataclasses
import re
import types
import typing
from typing import Any, BinaryIO, Dict, List, Type, TypeVar, Union
from xml.etree import ElementTree

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

# The literal "xml" is matched case-sensitively while the suffix accepts
# either case (text/xml+Other matches, text/XML does not).
XML_MEDIA_TYPE = re.compile(r".+/xml(\+[a-zA-Z0-9]+)?")


class XmlEntityReader(EntityReader):
    """Reads XML documents into pydantic models, dataclasses or any other
    type pydantic can validate.

    The document is first turned into a dict (see element_to_value), then
    validated against the target type. Fields are matched by child element
    tag, falling back to an attribute of the same name on the parent
    element; use pydantic.Field(alias=...) for tags that are not valid
    Python names. The tag of the root element is not checked.
    """

    def supports(self, target_type: type, content_type: str) -> bool:
        return XML_MEDIA_TYPE.fullmatch(media_type(content_type)) is not None

    def read(
        self, target_type: Type[T], content_type: str, data: Union[BinaryIO, bytes]
    ) -> T:
        try:
            root = ElementTree.parse(as_stream(data)).getroot()
        except ElementTree.ParseError as e:
            raise ParseFailedError(f"malformed XML content: {e}") from e

        adapter = type_adapter(target_type)
        try:
            return adapter.validate_python(element_to_value(root, target_type))
        except pydantic.ValidationError as e:
            raise ParseFailedError(
                f"cannot bind XML content to {target_type!r}: {e}"
            ) from e


def element_to_value(element: ElementTree.Element, tp: Any = Any) -> Any:
    """Convert an element into the plain value validated against tp.

    Elements without children or attributes become their text. Other
    elements become a dict of their attributes, overridden by their child
    elements keyed by tag. Repeated tags, and tags of list fields of tp,
    become lists.
    """
    if len(element) == 0 and not element.attrib:
        return element.text or ""

    fields = _field_types(_unwrap_optional(tp))
    children: Dict[str, List[ElementTree.Element]] = {}
    for child in element:
        children.setdefault(child.tag, []).append(child)

    value: Dict[str, Any] = dict(element.attrib)
    for tag, elements in children.items():
        field_type = _unwrap_optional(fields.get(tag, Any))
        if typing.get_origin(field_type) is list:
            (item_type,) = typing.get_args(field_type) or (Any,)
            value[tag] = [element_to_value(e, item_type) for e in elements]
        elif len(elements) > 1:
            value[tag] = [element_to_value(e) for e in elements]
        else:
            value[tag] = element_to_value(elements[0], field_type)
    return value


def _field_types(tp: Any) -> Dict[str, Any]:
    # Keyed by the name the field is validated from.
    if isinstance(tp, type) and issubclass(tp, pydantic.BaseModel):
        return {
            info.alias or name: info.annotation
            for name, info in tp.model_fields.items()
        }
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return typing.get_type_hints(tp)
    return {}


def _unwrap_optional(tp: Any) -> Any:
    if typing.get_origin(tp) in (Union, types.UnionType):
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


register_entity_reader("xml", XmlEntityReader())
