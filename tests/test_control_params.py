import base64

import pytest

from valconsole.control.params import encode_hash, parse_data, parse_int, parse_int256, parse_uint
from valconsole.utils.exceptions import FormatError, ParameterError

HASH = bytes(range(32))


def test_parse_int256_accepts_hex_and_base64_forms_of_same_value() -> None:
    hex_form = HASH.hex()
    b64_form = base64.b64encode(HASH).decode()
    assert len(hex_form) == 64
    assert len(b64_form) == 44
    assert parse_int256(hex_form, "key_hash") == HASH
    assert parse_int256(hex_form.upper(), "key_hash") == HASH
    assert parse_int256(b64_form, "key_hash") == HASH


@pytest.mark.parametrize("length", [0, 43, 45, 63, 65, 88])
def test_parse_int256_rejects_other_lengths(length: int) -> None:
    with pytest.raises(FormatError) as exc_info:
        parse_int256("a" * length if length else "", "key_hash")
    assert exc_info.value.details["parameter"].startswith("key_hash")


def test_parse_int256_rejects_bad_digits() -> None:
    with pytest.raises(FormatError):
        parse_int256("zz" * 32, "key_hash")
    with pytest.raises(FormatError):
        parse_int256("!" * 44, "key_hash")


def test_missing_parameter_is_parameter_error() -> None:
    with pytest.raises(ParameterError) as exc_info:
        parse_int256(None, "key_hash")
    assert "you must give key_hash" in exc_info.value.message


def test_parse_strips_surrounding_quotes() -> None:
    assert parse_int('"42"', "n") == 42
    assert parse_data('"0A4D"', "data") == b"\x0a\x4d"


def test_parse_int_range_and_digits() -> None:
    assert parse_int("-5", "n") == -5
    assert parse_int("2147483647", "n") == 2**31 - 1
    with pytest.raises(FormatError):
        parse_int("2147483648", "n")
    with pytest.raises(FormatError):
        parse_int("1.5", "n")
    with pytest.raises(FormatError):
        parse_uint("-1", "n")


def test_encode_hash_is_upper_hex_and_parses_back() -> None:
    text = encode_hash(HASH)
    assert text == HASH.hex().upper()
    assert parse_int256(text, "key_hash") == HASH
