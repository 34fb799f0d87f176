"""TL envelope types and codec."""

from valconsole.tl.codec import deserialize_boxed, serialize_boxed
from valconsole.tl.schema import RESPONSE_TYPES, ControlQuery, ControlQueryError, Response, Success, TLObject

__all__ = [
    "ControlQuery",
    "ControlQueryError",
    "RESPONSE_TYPES",
    "Response",
    "Success",
    "TLObject",
    "deserialize_boxed",
    "serialize_boxed",
]
