import hashlib
import hmac

import pytest
from pydantic import ValidationError

from checkbot.codec.base62 import encode_base36, encode_bytes_base62
from checkbot.codec.inline_message_id import InlineMessageId, InlineMessageId64, pack_inline_message_id
from checkbot.codec.location import LocationCodec, LocationSigner
from checkbot.common.errors import ParseError
from checkbot.common.models import ChecklistMessageLocation, UnsentChecklistLocation

INLINE_64 = pack_inline_message_id(InlineMessageId64(dc_id=2, owner_id=5, id=77, access_hash=-123456789))
INLINE_64_OTHER_OWNER = pack_inline_message_id(InlineMessageId64(dc_id=2, owner_id=6, id=77, access_hash=42))
INLINE_SHORT = pack_inline_message_id(InlineMessageId(dc_id=4, id=1234567890123, access_hash=987))

LOCATIONS = {
    "c": ChecklistMessageLocation(source_chat_id=5, source_message_id=101, salt="abc"),
    "f": ChecklistMessageLocation(
        source_chat_id=5, source_message_id=101, salt="Xy9", foreign_chat_id=-1001234, foreign_message_id=7
    ),
    "i": ChecklistMessageLocation(source_chat_id=5, source_message_id=3, salt="q0Q", inline_message_id=INLINE_SHORT),
    "j": ChecklistMessageLocation(
        source_chat_id=5, source_message_id=3, salt="q0Q", inline_message_id=INLINE_SHORT, is_personal=True
    ),
    "I": ChecklistMessageLocation(source_chat_id=5, source_message_id=3, salt="zzz", inline_message_id=INLINE_64),
    "J": ChecklistMessageLocation(
        source_chat_id=5, source_message_id=3, salt="zzz", inline_message_id=INLINE_64, is_personal=True
    ),
}


@pytest.mark.parametrize("tag", sorted(LOCATIONS))
def test_round_trip_per_variant(codec: LocationCodec, tag: str) -> None:
    location = LOCATIONS[tag]

    fields = codec.encode(location)

    assert fields[0] == "t"
    assert fields[1] == tag
    assert codec.decode(fields) == location


def test_inline_id_owned_by_someone_else_stays_verbatim(codec: LocationCodec) -> None:
    location = ChecklistMessageLocation(
        source_chat_id=5, source_message_id=3, salt="abc", inline_message_id=INLINE_64_OTHER_OWNER
    )

    fields = codec.encode(location)

    assert fields[1] == "i"
    assert fields[4] == INLINE_64_OTHER_OWNER
    assert codec.decode(fields) == location


def test_signature_shape_and_payload(codec: LocationCodec) -> None:
    location = ChecklistMessageLocation(source_chat_id=1, source_message_id=2, salt="abc")
    digest = hmac.new(b"test-secret", b'[1,null,null,null,null,"abc"]', hashlib.sha256).digest()

    signature = codec.encode(location)[-1]

    assert signature == "abc" + encode_bytes_base62(digest)[:12]
    assert len(signature) == 15


def test_source_message_id_is_not_signed(codec: LocationCodec) -> None:
    first = ChecklistMessageLocation(source_chat_id=1, source_message_id=2, salt="abc")
    second = first.model_copy(update={"source_message_id": 3})

    assert codec.encode(first)[-1] == codec.encode(second)[-1]


def test_index_round_trip(codec: LocationCodec) -> None:
    fields = codec.encode_with_index(LOCATIONS["f"], 40)

    assert fields[-1] == encode_base36(40)
    assert codec.decode_with_index(fields) == (LOCATIONS["f"], 40)


def test_tampered_signature_is_rejected(codec: LocationCodec) -> None:
    fields = codec.encode(LOCATIONS["c"])
    signature = fields[-1]
    fields[-1] = signature[:-1] + ("a" if signature[-1] != "a" else "b")

    with pytest.raises(ParseError):
        codec.decode(fields)


def test_tampered_foreign_chat_is_rejected(codec: LocationCodec) -> None:
    fields = codec.encode(LOCATIONS["f"])
    fields[4] = encode_base36(-1009999)

    with pytest.raises(ParseError):
        codec.decode(fields)


def test_tampered_salt_is_rejected(codec: LocationCodec) -> None:
    fields = codec.encode(LOCATIONS["c"])
    fields[-1] = "abd" + fields[-1][3:]

    with pytest.raises(ParseError):
        codec.decode(fields)


def test_other_secret_is_rejected(codec: LocationCodec) -> None:
    other = LocationCodec(LocationSigner("another-secret"))

    with pytest.raises(ParseError):
        codec.decode(other.encode(LOCATIONS["i"]))


@pytest.mark.parametrize(
    "fields",
    [
        [],
        ["t"],
        ["x", "c", "5", "2t", "abcAAAAAAAAAAAA"],
        ["t", "q", "5", "2t", "abcAAAAAAAAAAAA"],
        ["t", "c", "5", "2t"],
        ["t", "c", "5", "2T", "abcAAAAAAAAAAAA"],
        ["t", "c", "5", "2t", "abc"],
        ["t", "i", "5", "2t", "", "abcAAAAAAAAAAAA"],
        ["t", "f", "5", "2t", "zz", "1", "abcAAAAAAAAAAAA"],
    ],
)
def test_malformed_tokens_raise_parse_error(codec: LocationCodec, fields: list[str]) -> None:
    with pytest.raises(ParseError):
        codec.decode(fields)


def test_decode_rejects_trailing_fields(codec: LocationCodec) -> None:
    with pytest.raises(ParseError):
        codec.decode(codec.encode_with_index(LOCATIONS["c"], 0))


def test_decode_with_index_requires_one_valid_index(codec: LocationCodec) -> None:
    fields = codec.encode(LOCATIONS["c"])

    for suffix in ([], ["-1"], ["Z"], ["0", "1"]):
        with pytest.raises(ParseError):
            codec.decode_with_index([*fields, *suffix])


def test_signer_requires_secret() -> None:
    with pytest.raises(ValueError):
        LocationSigner("")


@pytest.mark.parametrize("tag", ["I", "J"])
@pytest.mark.parametrize("position", [2, 4, 5, 6])
def test_tampered_compact_inline_fields_are_rejected(codec: LocationCodec, tag: str, position: int) -> None:
    fields = codec.encode(LOCATIONS[tag])
    assert fields[1] == tag
    fields[position] = fields[position] + "1"

    with pytest.raises(ParseError):
        codec.decode(fields)


def test_empty_inline_id_is_not_a_location() -> None:
    with pytest.raises(ValidationError):
        ChecklistMessageLocation(source_chat_id=5, source_message_id=3, salt="abc", inline_message_id="")
    with pytest.raises(ValidationError):
        UnsentChecklistLocation(source_chat_id=5, salt="abc", inline_message_id="")
