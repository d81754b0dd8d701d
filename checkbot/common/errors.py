"""Exception taxonomy for checklist operations."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""


class ChecklistError(Exception):
    """Base class for user-facing checklist failures.

    ``message_key`` selects the text shown to the user, ``context`` fills it in.
    """

    message_key = "unknown-error"

    def __init__(self, message_key: str | None = None, context: dict[str, Any] | None = None) -> None:
        if message_key is not None:
            self.message_key = message_key
        super().__init__(self.message_key)
        self.context = context or {}


class ParseError(ChecklistError):
    """A token was malformed or forged. The cause is never exposed."""

    message_key = "error-parsing-command"


class InvalidCharacterError(ChecklistError):
    message_key = "invalid-deep-link-param"

    def __init__(self, param: str) -> None:
        super().__init__(context={"param": param})
        self.param = param


class PermissionReason(str, Enum):
    NOT_ENOUGH_RIGHTS = "not_enough_rights"
    NOT_ADMINISTRATOR = "not_administrator"
    PERSONAL_CHECKLIST = "personal_checklist"


_PERMISSION_MESSAGES = {
    PermissionReason.NOT_ENOUGH_RIGHTS: "no-rights-to-edit-checklist",
    PermissionReason.NOT_ADMINISTRATOR: "you-are-not-administrator",
    PermissionReason.PERSONAL_CHECKLIST: "checklist-is-personal",
}


class ChecklistPermissionError(ChecklistError):
    def __init__(self, reason: PermissionReason, message_key: str | None = None) -> None:
        super().__init__(message_key or _PERMISSION_MESSAGES[reason])
        self.reason = reason


class InvalidIndexError(ChecklistError):
    message_key = "invalid-checkbox-index"

    def __init__(self, index: int) -> None:
        super().__init__(context={"index": index})
        self.index = index


class ReadFailure(ChecklistError):
    message_key = "failed-to-read-checklist"


class TransportFailure(ChecklistError):
    message_key = "error-creating-checklist"
