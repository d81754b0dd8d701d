"""Deep-link parameter escaping and URL builders.

``-`` is the escape character and ``_`` separates fields:
``["a-b_c", "d"]`` becomes ``a--b-_c_d``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from checkbot.common.errors import InvalidCharacterError

SEPARATOR = "_"
ESCAPE = "-"

_ALLOWED = re.compile(r"^[A-Za-z0-9_-]+$")


def encode_params(params: Sequence[str | int]) -> str:
    fields = [str(param) for param in params]
    for field in fields:
        if not _ALLOWED.match(field):
            raise InvalidCharacterError(field)
    escaped = [field.replace(ESCAPE, ESCAPE * 2).replace(SEPARATOR, ESCAPE + SEPARATOR) for field in fields]
    return SEPARATOR.join(escaped)


def decode_params(encoded: str) -> list[str]:
    fields: list[str] = []
    current: list[str] = []
    idx = 0
    while idx < len(encoded):
        char = encoded[idx]
        if char == ESCAPE and idx + 1 < len(encoded) and encoded[idx + 1] in (ESCAPE, SEPARATOR):
            current.append(encoded[idx + 1])
            idx += 2
            continue
        if char == SEPARATOR:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        idx += 1
    fields.append("".join(current))
    return fields


def deep_link_url(bot_username: str, start_param: str) -> str:
    return f"https://t.me/{bot_username}?start={start_param}"


def encode_deep_link_url(bot_username: str, params: Sequence[str | int]) -> str:
    return deep_link_url(bot_username, encode_params(params))


def start_app_url(bot_username: str, app_name: str, start_param: str) -> str:
    return f"https://t.me/{bot_username}/{app_name}?startapp={start_param}"


def encode_start_app_url(bot_username: str, app_name: str, params: Sequence[str | int]) -> str:
    return start_app_url(bot_username, app_name, encode_params(params))
