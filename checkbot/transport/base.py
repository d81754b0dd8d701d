"""Transport-facing types shared by the checklist core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

ReplyMarkup = dict[str, Any]

FORBIDDEN = 403


class ChatMemberStatus(str, Enum):
    CREATOR = "creator"
    ADMINISTRATOR = "administrator"
    MEMBER = "member"
    RESTRICTED = "restricted"
    LEFT = "left"
    KICKED = "kicked"


class ChatType(str, Enum):
    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


class TransportError(Exception):
    """Raised by a transport when the platform rejects or cannot serve a call."""

    def __init__(self, description: str, error_code: int | None = None) -> None:
        super().__init__(description)
        self.description = description
        self.error_code = error_code

    @property
    def is_forbidden(self) -> bool:
        return self.error_code == FORBIDDEN

    @property
    def is_not_modified(self) -> bool:
        return "message is not modified" in self.description


@dataclass(frozen=True)
class SentMessage:
    chat_id: int
    message_id: int
    text: str | None = None
    caption: str | None = None


@dataclass(frozen=True)
class BotIdentity:
    id: int
    username: str


class MessageTransport(Protocol):
    """Async capability set the checklist core needs from the chat platform."""

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        parse_mode: str | None = "HTML",
        reply_markup: ReplyMarkup | None = None,
        disable_notification: bool = False,
    ) -> SentMessage: ...

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        *,
        parse_mode: str | None = "HTML",
        reply_markup: ReplyMarkup | None = None,
    ) -> None: ...

    async def edit_inline_message_text(
        self,
        inline_message_id: str,
        text: str,
        *,
        parse_mode: str | None = "HTML",
        reply_markup: ReplyMarkup | None = None,
    ) -> None: ...

    async def forward_message(
        self,
        chat_id: int,
        from_chat_id: int,
        message_id: int,
        *,
        disable_notification: bool = True,
    ) -> SentMessage: ...

    async def delete_message(self, chat_id: int, message_id: int) -> None: ...

    async def get_chat_member_status(self, chat_id: int, user_id: int) -> str: ...

    async def get_chat_type(self, chat_id: int) -> str: ...

    async def get_me(self) -> BotIdentity: ...

    async def answer_inline_query(
        self,
        inline_query_id: str,
        results: list[dict[str, Any]],
        *,
        cache_time: int = 0,
        button: dict[str, Any] | None = None,
    ) -> None: ...

    async def answer_callback_query(self, callback_query_id: str, text: str | None = None) -> None: ...
