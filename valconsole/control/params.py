"""Parameter parsing helpers shared by registry commands and workflows."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Callable, TypeVar

from valconsole.utils.exceptions import ConsoleError, FormatError, ParameterError

T = TypeVar("T")

HASH_BASE64_LEN = 44
HASH_HEX_LEN = 64
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
UINT32_MAX = 2**32 - 1

_DECIMAL_RE = re.compile(r"^[+-]?[0-9]+$")
_UNSIGNED_RE = re.compile(r"^[0-9]+$")


def parse_any(value: str | None, name: str, parse_value: Callable[[str], T]) -> T:
    """Parse one positional parameter; missing is a ParameterError, unparsable a FormatError."""
    if value is None:
        raise ParameterError(f"insufficient parameters: you must give {name}", name=name)
    raw = str(value).strip('"')
    try:
        return parse_value(raw)
    except ConsoleError as exc:
        exc.with_context(parameter=name)
        raise
    except (ValueError, binascii.Error) as exc:
        raise FormatError(f"you must give {name}: {exc}", name=name) from exc


def _decode_int256(value: str) -> bytes:
    if len(value) == HASH_BASE64_LEN:
        decoded = base64.b64decode(value, validate=True)
    elif len(value) == HASH_HEX_LEN:
        decoded = bytes.fromhex(value)
    else:
        raise FormatError(f"wrong hash: {value} with length: {len(value)}")
    if len(decoded) != 32:
        raise FormatError(f"wrong hash: {value} decodes to {len(decoded)} bytes")
    return decoded


def _decode_int32(value: str) -> int:
    if not _DECIMAL_RE.match(value):
        raise ValueError(f"invalid digit found in {value!r}")
    number = int(value)
    if number < INT32_MIN or number > INT32_MAX:
        raise ValueError(f"number {value} does not fit into int32")
    return number


def _decode_uint32(value: str) -> int:
    if not _UNSIGNED_RE.match(value):
        raise ValueError(f"invalid digit found in {value!r}")
    number = int(value)
    if number > UINT32_MAX:
        raise ValueError(f"number {value} does not fit into uint32")
    return number


def parse_int256(value: str | None, name: str) -> bytes:
    """32-byte hash given as 44 base64 or 64 hex characters."""
    return parse_any(value, f"{name} in hex or base64 format", _decode_int256)


def parse_int(value: str | None, name: str) -> int:
    return parse_any(value, name, _decode_int32)


def parse_uint(value: str | None, name: str) -> int:
    return parse_any(value, name, _decode_uint32)


def parse_data(value: str | None, name: str) -> bytes:
    return parse_any(value, f"{name} in hex format", bytes.fromhex)


def parse_str(value: str | None, name: str) -> str:
    return parse_any(value, name, lambda raw: raw)


def encode_hash(value: bytes) -> str:
    """Hex form accepted back by parse_int256."""
    return value.hex().upper()
