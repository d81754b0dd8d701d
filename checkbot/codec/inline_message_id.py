"""Pack and unpack the platform's opaque inline message identifiers.

An inline message id is the url-safe base64 form of one of two structures,
without their constructor id:

* short form, 20 bytes: ``dc_id:int32 id:int64 access_hash:int64``
* 64-bit form, 24 bytes: ``dc_id:int32 owner_id:int64 id:int32 access_hash:int64``

All fields are little-endian and signed.
"""

from __future__ import annotations

import base64
import binascii
import struct
from dataclasses import dataclass

_SHORT = struct.Struct("<iqq")
_LONG = struct.Struct("<iqiq")


@dataclass(frozen=True)
class InlineMessageId:
    dc_id: int
    id: int
    access_hash: int


@dataclass(frozen=True)
class InlineMessageId64:
    dc_id: int
    owner_id: int
    id: int
    access_hash: int


def _b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def unpack_inline_message_id(value: str) -> InlineMessageId | InlineMessageId64 | None:
    """Return the decoded structure, or None when ``value`` is not a known form."""
    try:
        raw = _b64decode(value)
    except (binascii.Error, ValueError):
        return None
    if len(raw) == _SHORT.size:
        return InlineMessageId(*_SHORT.unpack(raw))
    if len(raw) == _LONG.size:
        return InlineMessageId64(*_LONG.unpack(raw))
    return None


def pack_inline_message_id(data: InlineMessageId | InlineMessageId64) -> str:
    if isinstance(data, InlineMessageId64):
        raw = _LONG.pack(data.dc_id, data.owner_id, data.id, data.access_hash)
    else:
        raw = _SHORT.pack(data.dc_id, data.id, data.access_hash)
    return _b64encode(raw)
