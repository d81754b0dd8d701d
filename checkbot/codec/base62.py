"""Base-36 and base-62 codecs for signed integers and raw bytes."""

from __future__ import annotations

import re

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

_BASE36_RE = re.compile(r"^-?[0-9a-z]+$")
_BASE62_RE = re.compile(r"^-?[0-9a-zA-Z]+$")


def _encode_int(value: int, alphabet: str) -> str:
    base = len(alphabet)
    if value == 0:
        return alphabet[0]
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, base)
        digits.append(alphabet[remainder])
    return sign + "".join(reversed(digits))


def _decode_int(text: str, alphabet: str, pattern: re.Pattern[str]) -> int:
    if not pattern.match(text):
        raise ValueError(f"Invalid base-{len(alphabet)} number: {text!r}")
    negative = text.startswith("-")
    digits = text[1:] if negative else text
    base = len(alphabet)
    value = 0
    for char in digits:
        value = value * base + alphabet.index(char)
    return -value if negative else value


def encode_base36(value: int) -> str:
    return _encode_int(value, BASE36_ALPHABET)


def decode_base36(text: str) -> int:
    """Strict inverse of ``encode_base36``: lowercase digits and an optional sign only."""
    return _decode_int(text, BASE36_ALPHABET, _BASE36_RE)


def encode_base62(value: int) -> str:
    return _encode_int(value, BASE62_ALPHABET)


def decode_base62(text: str) -> int:
    return _decode_int(text, BASE62_ALPHABET, _BASE62_RE)


def encode_bytes_base62(data: bytes) -> str:
    """Encode bytes as a big-endian base-62 number.

    Every leading zero byte is kept as one leading ``0`` digit, so the output
    matches the usual base-x encoders.
    """
    leading = len(data) - len(data.lstrip(b"\x00"))
    number = int.from_bytes(data, "big")
    body = _encode_int(number, BASE62_ALPHABET) if number else ""
    return BASE62_ALPHABET[0] * leading + body
