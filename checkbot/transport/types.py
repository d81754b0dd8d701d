"""Subset of the platform's update payloads consumed by the bot."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

_COMMAND_RE = re.compile(r"^/([A-Za-z0-9_]+)(?:@[A-Za-z0-9_]+)?(?:\s+|$)(.*)", re.DOTALL)


class _Incoming(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(_Incoming):
    id: int
    is_bot: bool = False
    first_name: str = ""
    username: str | None = None
    language_code: str | None = None


class Chat(_Incoming):
    id: int
    type: str


class Message(_Incoming):
    message_id: int
    chat: Chat
    from_user: User | None = Field(default=None, alias="from")
    sender_chat: Chat | None = None
    text: str | None = None
    via_bot: User | None = None
    has_protected_content: bool = False

    def command(self) -> tuple[str, str] | None:
        """Return ``(name, argument)`` when the text starts with a bot command."""
        match = _COMMAND_RE.match(self.text or "")
        if not match:
            return None
        return match.group(1), match.group(2)


class InlineQuery(_Incoming):
    id: str
    from_user: User = Field(alias="from")
    query: str


class ChosenInlineResult(_Incoming):
    result_id: str
    from_user: User = Field(alias="from")
    query: str
    inline_message_id: str | None = None


class CallbackQuery(_Incoming):
    id: str
    from_user: User = Field(alias="from")
    message: Message | None = None
    data: str | None = None


class Update(_Incoming):
    update_id: int
    message: Message | None = None
    channel_post: Message | None = None
    edited_channel_post: Message | None = None
    inline_query: InlineQuery | None = None
    chosen_inline_result: ChosenInlineResult | None = None
    callback_query: CallbackQuery | None = None
