"""Validation of mini-app ``initData`` query strings."""

from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl


class InitDataError(ValueError):
    pass


@dataclass(frozen=True)
class WebAppUser:
    id: int
    first_name: str = ""
    username: str | None = None
    language_code: str | None = None


def validate_init_data(init_data: str, bot_token: str) -> WebAppUser:
    """Check the ``hash`` field of ``init_data`` and return the signed-in user.

    The secret key is HMAC-SHA256("WebAppData", bot_token); the hash covers the
    other fields as sorted ``key=value`` lines.
    """
    fields = dict(parse_qsl(init_data, keep_blank_values=True))
    received = fields.pop("hash", None)
    if not received:
        raise InitDataError("hash missing")

    data_check_string = "\n".join(f"{key}={fields[key]}" for key in sorted(fields))
    secret_key = hmac.new(b"WebAppData", bot_token.encode("utf-8"), hashlib.sha256).digest()
    expected = hmac.new(secret_key, data_check_string.encode("utf-8"), hashlib.sha256).hexdigest()
    if not hmac.compare_digest(expected, received):
        raise InitDataError("hash mismatch")

    raw_user = fields.get("user")
    if not raw_user:
        raise InitDataError("user missing")
    try:
        user: dict[str, Any] = json.loads(raw_user)
        return WebAppUser(
            id=int(user["id"]),
            first_name=str(user.get("first_name", "")),
            username=user.get("username"),
            language_code=user.get("language_code"),
        )
    except (ValueError, KeyError, TypeError) as exc:
        raise InitDataError("user malformed") from exc
