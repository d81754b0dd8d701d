"""Signed, compact tokens identifying where a checklist lives.

A token is a short list of fields: ``"t"``, a variant tag, the location
fields in base-36 / base-62, and a trailing signature. Toggle links append
one more field, the base-36 line index.

Variant tags:

* ``c``: canonical copy only
* ``i`` / ``j``: canonical copy plus an inline copy, id kept verbatim
  (``j`` is personal)
* ``I`` / ``J``: same, with a 64-bit inline id split into its numeric parts
* ``f``: canonical copy plus a foreign mirror

The signature is the 3-character salt followed by the first 12 base-62
characters of an HMAC-SHA256 over the location. It is the only
authenticity check, every failure to decode or verify raises the same
ParseError.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import struct
from dataclasses import dataclass
from typing import ClassVar, Protocol

from pydantic import ValidationError

from checkbot.codec.base62 import (
    decode_base36,
    decode_base62,
    encode_base36,
    encode_base62,
    encode_bytes_base62,
)
from checkbot.codec.inline_message_id import (
    InlineMessageId64,
    pack_inline_message_id,
    unpack_inline_message_id,
)
from checkbot.common.errors import ParseError
from checkbot.common.models import ChecklistMessageLocation

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "t"
SALT_LENGTH = 3
SIGNATURE_HASH_LENGTH = 12
SIGNATURE_LENGTH = SALT_LENGTH + SIGNATURE_HASH_LENGTH


class LocationSigner:
    """Computes and checks location signatures with one shared secret."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("An HMAC secret is required")
        self._secret = secret.encode("utf-8")

    def sign(self, location: ChecklistMessageLocation) -> str:
        # The inline id is listed twice; existing tokens were signed this way.
        payload = json.dumps(
            [
                location.source_chat_id,
                location.inline_message_id,
                location.inline_message_id,
                location.foreign_chat_id,
                location.foreign_message_id,
                location.salt,
            ],
            separators=(",", ":"),
            ensure_ascii=False,
        )
        digest = hmac.new(self._secret, payload.encode("utf-8"), hashlib.sha256).digest()
        return f"{location.salt}{encode_bytes_base62(digest)[:SIGNATURE_HASH_LENGTH]}"

    def verify(self, location: ChecklistMessageLocation, signature: str) -> bool:
        return hmac.compare_digest(self.sign(location), signature)


class TokenVariant(Protocol):
    tags: ClassVar[tuple[str, ...]]
    field_count: ClassVar[int]

    def to_fields(self) -> list[str]: ...

    def to_location(self, salt: str) -> ChecklistMessageLocation: ...


@dataclass(frozen=True)
class CanonicalToken:
    tags: ClassVar[tuple[str, ...]] = ("c",)
    field_count: ClassVar[int] = 2

    source_chat_id: int
    source_message_id: int

    @classmethod
    def from_fields(cls, tag: str, fields: list[str]) -> CanonicalToken:
        return cls(decode_base36(fields[0]), decode_base36(fields[1]))

    def to_fields(self) -> list[str]:
        return ["c", encode_base36(self.source_chat_id), encode_base36(self.source_message_id)]

    def to_location(self, salt: str) -> ChecklistMessageLocation:
        return ChecklistMessageLocation(
            source_chat_id=self.source_chat_id,
            source_message_id=self.source_message_id,
            salt=salt,
        )


@dataclass(frozen=True)
class InlineToken:
    tags: ClassVar[tuple[str, ...]] = ("i", "j")
    field_count: ClassVar[int] = 3

    source_chat_id: int
    source_message_id: int
    inline_message_id: str
    is_personal: bool

    @classmethod
    def from_fields(cls, tag: str, fields: list[str]) -> InlineToken:
        if not fields[2]:
            raise ValueError("Empty inline message id")
        return cls(decode_base36(fields[0]), decode_base36(fields[1]), fields[2], tag == "j")

    def to_fields(self) -> list[str]:
        return [
            "j" if self.is_personal else "i",
            encode_base36(self.source_chat_id),
            encode_base36(self.source_message_id),
            self.inline_message_id,
        ]

    def to_location(self, salt: str) -> ChecklistMessageLocation:
        return ChecklistMessageLocation(
            source_chat_id=self.source_chat_id,
            source_message_id=self.source_message_id,
            inline_message_id=self.inline_message_id,
            is_personal=self.is_personal,
            salt=salt,
        )


@dataclass(frozen=True)
class Inline64Token:
    """Inline copy whose 64-bit id is owned by the canonical chat's user."""

    tags: ClassVar[tuple[str, ...]] = ("I", "J")
    field_count: ClassVar[int] = 5

    source_chat_id: int
    source_message_id: int
    dc_id: int
    id: int
    access_hash: int
    is_personal: bool

    @classmethod
    def from_fields(cls, tag: str, fields: list[str]) -> Inline64Token:
        return cls(
            decode_base36(fields[0]),
            decode_base36(fields[1]),
            decode_base36(fields[2]),
            decode_base36(fields[3]),
            decode_base62(fields[4]),
            tag == "J",
        )

    def to_fields(self) -> list[str]:
        return [
            "J" if self.is_personal else "I",
            encode_base36(self.source_chat_id),
            encode_base36(self.source_message_id),
            encode_base36(self.dc_id),
            encode_base36(self.id),
            encode_base62(self.access_hash),
        ]

    def to_location(self, salt: str) -> ChecklistMessageLocation:
        inline_message_id = pack_inline_message_id(
            InlineMessageId64(
                dc_id=self.dc_id,
                owner_id=self.source_chat_id,
                id=self.id,
                access_hash=self.access_hash,
            )
        )
        return ChecklistMessageLocation(
            source_chat_id=self.source_chat_id,
            source_message_id=self.source_message_id,
            inline_message_id=inline_message_id,
            is_personal=self.is_personal,
            salt=salt,
        )


@dataclass(frozen=True)
class ForeignToken:
    tags: ClassVar[tuple[str, ...]] = ("f",)
    field_count: ClassVar[int] = 4

    source_chat_id: int
    source_message_id: int
    foreign_chat_id: int
    foreign_message_id: int

    @classmethod
    def from_fields(cls, tag: str, fields: list[str]) -> ForeignToken:
        return cls(*(decode_base36(field) for field in fields))

    def to_fields(self) -> list[str]:
        return [
            "f",
            encode_base36(self.source_chat_id),
            encode_base36(self.source_message_id),
            encode_base36(self.foreign_chat_id),
            encode_base36(self.foreign_message_id),
        ]

    def to_location(self, salt: str) -> ChecklistMessageLocation:
        return ChecklistMessageLocation(
            source_chat_id=self.source_chat_id,
            source_message_id=self.source_message_id,
            foreign_chat_id=self.foreign_chat_id,
            foreign_message_id=self.foreign_message_id,
            salt=salt,
        )


_VARIANTS = {tag: variant for variant in (CanonicalToken, InlineToken, Inline64Token, ForeignToken) for tag in variant.tags}


def _packable_inline_id(location: ChecklistMessageLocation) -> InlineMessageId64 | None:
    """Return the unpacked id when the I/J form reproduces it exactly."""
    unpacked = unpack_inline_message_id(location.inline_message_id or "")
    if not isinstance(unpacked, InlineMessageId64):
        return None
    if unpacked.owner_id != location.source_chat_id:
        return None
    if pack_inline_message_id(unpacked) != location.inline_message_id:
        return None
    return unpacked


def variant_for(location: ChecklistMessageLocation) -> TokenVariant:
    if location.inline_message_id is not None:
        unpacked = _packable_inline_id(location)
        if unpacked is not None:
            return Inline64Token(
                source_chat_id=location.source_chat_id,
                source_message_id=location.source_message_id,
                dc_id=unpacked.dc_id,
                id=unpacked.id,
                access_hash=unpacked.access_hash,
                is_personal=location.is_personal,
            )
        return InlineToken(
            source_chat_id=location.source_chat_id,
            source_message_id=location.source_message_id,
            inline_message_id=location.inline_message_id,
            is_personal=location.is_personal,
        )
    if location.foreign_chat_id is not None and location.foreign_message_id is not None:
        return ForeignToken(
            source_chat_id=location.source_chat_id,
            source_message_id=location.source_message_id,
            foreign_chat_id=location.foreign_chat_id,
            foreign_message_id=location.foreign_message_id,
        )
    return CanonicalToken(location.source_chat_id, location.source_message_id)


class LocationCodec:
    """Turns locations into signed token fields and back."""

    def __init__(self, signer: LocationSigner) -> None:
        self.signer = signer

    def encode(self, location: ChecklistMessageLocation) -> list[str]:
        return [TOKEN_PREFIX, *variant_for(location).to_fields(), self.signer.sign(location)]

    def encode_with_index(self, location: ChecklistMessageLocation, line_index: int) -> list[str]:
        return [*self.encode(location), encode_base36(line_index)]

    def decode(self, fields: list[str]) -> ChecklistMessageLocation:
        """Decode and verify a token, raising ParseError on any failure."""
        location, rest = self._decode_prefix(fields)
        if rest:
            raise ParseError()
        return location

    def decode_with_index(self, fields: list[str]) -> tuple[ChecklistMessageLocation, int]:
        location, rest = self._decode_prefix(fields)
        if len(rest) != 1:
            raise ParseError()
        try:
            line_index = decode_base36(rest[0])
        except ValueError as exc:
            raise ParseError() from exc
        if line_index < 0:
            raise ParseError()
        return location, line_index

    def _decode_prefix(self, fields: list[str]) -> tuple[ChecklistMessageLocation, list[str]]:
        if len(fields) < 2 or fields[0] != TOKEN_PREFIX:
            raise ParseError()
        tag = fields[1]
        variant = _VARIANTS.get(tag)
        if variant is None:
            raise ParseError()
        end = 2 + variant.field_count
        if len(fields) < end + 1:
            raise ParseError()
        signature = fields[end]
        if len(signature) != SIGNATURE_LENGTH:
            raise ParseError()
        try:
            token = variant.from_fields(tag, fields[2:end])
            location = token.to_location(signature[:SALT_LENGTH])
        except (ValueError, ValidationError, struct.error) as exc:
            raise ParseError() from exc
        if not self.signer.verify(location, signature):
            logger.debug("Rejected token with a mismatching signature")
            raise ParseError()
        return location, fields[end + 1 :]
