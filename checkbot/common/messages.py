"""English user-facing strings keyed by message key."""

from __future__ import annotations

import html
from typing import Any

MESSAGES: dict[str, str] = {
    "unknown-error": "Something went wrong, please try again later.",
    "error-parsing-command": "Error parsing command...",
    "invalid-deep-link-param": "The link contains invalid characters.",
    "no-rights-to-edit-checklist": "You don't have the rights to edit this checklist.",
    "no-rights-to-edit-group-checklist": "You must be a member of the chat to edit this checklist.",
    "you-are-not-administrator": "Only administrators can edit checklists in a channel.",
    "checklist-is-personal": "This checklist is personal, only its creator can edit it.",
    "invalid-checkbox-index": "Invalid checkbox idx",
    "failed-to-read-checklist": "I couldn't read the checklist, was it deleted?",
    "failed-to-read-checklist-error": "I couldn't read the checklist: {message}",
    "failed-to-read-checklist-unknown": "I couldn't read the checklist because of an unknown error.",
    "error-creating-checklist": "There was an error while creating the checklist.",
    "check-command-usage": "Usage: /check followed by your list, one item per line.",
    "anonymous-admin-protected": (
        "This bot does not work in a group with protected content when used by an anonymous admin"
    ),
    "you-must-start-for-protected-content": "You must start the bot to use it in a group with protected content",
    "you-must-start-for-inline-mode": "You must start the bot to use it in inline mode",
    "use-text-to-recreate-checklist": "Use this text to recreate the checklist",
    "click-here-to-start": "Click here to start",
    "generating-links": "Generating links",
    "shared-checklist": "Shared checklist",
    "personal-checklist": "Personal checklist",
    "inline-too-long": "Warning, inline query is too long!",
    "done-press-back": "Done! Press back to return to the chat.",
    "never-show-again": "Never show again",
    "i-will-not-show-again": "Ok, I won't show this again.",
    "you-can-show-again-in-config": "You can turn it back on with /config",
    "welcome": (
        "Send me a list and I'll turn it into a checklist.\n"
        "Lines starting with - [ ] become boxes you can tap to tick."
    ),
    "config": "Settings",
    "default-checked-box": "Default checked box",
    "default-unchecked-box": "Default unchecked box",
    "if-a-box-is-present-bot-will-prefer": "If a box is already present in your list, its style is kept.",
    "show-edit-confirmation": "Show edit confirmation",
    "hide-edit-confirmation": "Hide edit confirmation",
    "invalid-choice": "Invalid choice",
    "default-already-set": "Already set",
    "updated-preference": "Preference updated",
}


def t(key: str, **context: Any) -> str:
    template = MESSAGES.get(key, MESSAGES["unknown-error"])
    if not context:
        return template
    try:
        return template.format(**context)
    except (KeyError, IndexError):
        return template


def t_html(key: str, **context: Any) -> str:
    """Like ``t`` but for HTML replies: context values are escaped."""
    return t(key, **{name: html.escape(str(value), quote=False) for name, value in context.items()})
