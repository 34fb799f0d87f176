"""Binary (de)serialization of TL objects."""

from __future__ import annotations

import struct
from typing import Any

from valconsole.tl.schema import TL_TYPES_BY_NAME, TL_TYPES_BY_TAG, TLObject
from valconsole.utils.exceptions import ProtocolError

_SCALARS = {
    "int": "<i",
    "#": "<I",
    "long": "<q",
}


def _pack_bytes(value: bytes) -> bytes:
    length = len(value)
    if length < 254:
        head = bytes([length])
    else:
        head = b"\xfe" + length.to_bytes(3, "little")
    body = head + value
    return body + b"\x00" * (-len(body) % 4)


def _write(out: bytearray, tl_type: str, value: Any) -> None:
    if tl_type in _SCALARS:
        out += struct.pack(_SCALARS[tl_type], value)
    elif tl_type == "int256":
        if len(value) != 32:
            raise ProtocolError(f"int256 field must be 32 bytes, got {len(value)}")
        out += value
    elif tl_type == "bytes":
        out += _pack_bytes(bytes(value))
    elif tl_type == "string":
        out += _pack_bytes(value.encode("utf-8"))
    elif tl_type.startswith("vector "):
        item_type = tl_type[len("vector "):]
        out += struct.pack("<i", len(value))
        for item in value:
            _write(out, item_type, item)
    else:
        _write_object(out, value, boxed=_is_boxed(tl_type))


def _is_boxed(tl_type: str) -> bool:
    return tl_type.rpartition(".")[2][:1].isupper()


def _write_object(out: bytearray, obj: TLObject, *, boxed: bool) -> None:
    if boxed:
        out += obj.tl_tag
    for name, field_type in obj.tl_fields:
        _write(out, field_type, getattr(obj, name))


def serialize_boxed(obj: TLObject) -> bytes:
    """Serialize an object prefixed with its constructor tag."""
    out = bytearray()
    _write_object(out, obj, boxed=True)
    return bytes(out)


class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self.data):
            raise ProtocolError(f"truncated TL data: need {size} bytes at offset {self.pos}")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def unpack(self, fmt: str) -> Any:
        return struct.unpack(fmt, self.take(struct.calcsize(fmt)))[0]

    def take_bytes(self) -> bytes:
        start = self.pos
        length = self.take(1)[0]
        if length == 0xFE:
            length = int.from_bytes(self.take(3), "little")
        elif length == 0xFF:
            raise ProtocolError("invalid TL bytes length prefix")
        value = self.take(length)
        self.take(-(self.pos - start) % 4)
        return value


def _read(reader: _Reader, tl_type: str) -> Any:
    if tl_type in _SCALARS:
        return reader.unpack(_SCALARS[tl_type])
    if tl_type == "int256":
        return reader.take(32)
    if tl_type == "bytes":
        return reader.take_bytes()
    if tl_type == "string":
        try:
            return reader.take_bytes().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError(f"invalid utf-8 in TL string: {exc}") from exc
    if tl_type.startswith("vector "):
        item_type = tl_type[len("vector "):]
        count = reader.unpack("<i")
        if count < 0:
            raise ProtocolError(f"negative TL vector length {count}")
        return [_read(reader, item_type) for _ in range(count)]
    if _is_boxed(tl_type):
        return _read_boxed(reader)
    cls = TL_TYPES_BY_NAME.get(tl_type)
    if cls is None:
        raise ProtocolError(f"unknown TL type {tl_type}")
    return _read_fields(reader, cls)


def _read_fields(reader: _Reader, cls: type[TLObject]) -> TLObject:
    values = {name: _read(reader, field_type) for name, field_type in cls.tl_fields}
    return cls(**values)


def _read_boxed(reader: _Reader) -> TLObject:
    tag = reader.take(4)
    cls = TL_TYPES_BY_TAG.get(tag)
    if cls is None:
        raise ProtocolError(f"unknown TL constructor {tag.hex()}")
    return _read_fields(reader, cls)


def deserialize_boxed(data: bytes) -> TLObject:
    """Parse one boxed object; trailing bytes are a protocol error."""
    reader = _Reader(bytes(data))
    obj = _read_boxed(reader)
    if reader.pos != len(reader.data):
        raise ProtocolError(f"{len(reader.data) - reader.pos} trailing bytes after {obj.tl_name}")
    return obj
