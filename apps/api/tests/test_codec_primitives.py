import pytest

from checkbot.codec.base62 import (
    decode_base36,
    decode_base62,
    encode_base36,
    encode_base62,
    encode_bytes_base62,
)
from checkbot.codec.inline_message_id import (
    InlineMessageId,
    InlineMessageId64,
    pack_inline_message_id,
    unpack_inline_message_id,
)


@pytest.mark.parametrize("value, encoded", [(0, "0"), (35, "z"), (36, "10"), (-10, "-a"), (101, "2t")])
def test_base36_signed_integers(value: int, encoded: str) -> None:
    assert encode_base36(value) == encoded
    assert decode_base36(encoded) == value


def test_base62_covers_large_values() -> None:
    value = -(2**63)
    assert decode_base62(encode_base62(value)) == value
    assert encode_base62(61) == "Z"


@pytest.mark.parametrize("bad", ["", "-", "A", "1 2", "+1", "--1"])
def test_base36_decode_is_strict(bad: str) -> None:
    with pytest.raises(ValueError):
        decode_base36(bad)


def test_bytes_base62_keeps_leading_zero_bytes() -> None:
    assert encode_bytes_base62(b"\x00\x00\x01") == "001"
    assert encode_bytes_base62(b"\x3e") == "10"
    assert encode_bytes_base62(b"") == ""


def test_inline_message_id_64_bit_form() -> None:
    data = InlineMessageId64(dc_id=2, owner_id=5, id=77, access_hash=-123456789)

    packed = pack_inline_message_id(data)

    assert "=" not in packed
    assert unpack_inline_message_id(packed) == data


def test_inline_message_id_short_form() -> None:
    data = InlineMessageId(dc_id=4, id=1234567890123, access_hash=987)

    assert unpack_inline_message_id(pack_inline_message_id(data)) == data


@pytest.mark.parametrize("bad", ["", "abc", "!!!!", "AAAA"])
def test_unknown_inline_ids_unpack_to_none(bad: str) -> None:
    assert unpack_inline_message_id(bad) is None
