"""Message transport abstraction and its Bot API implementation."""

from .base import (
    BotIdentity,
    ChatMemberStatus,
    ChatType,
    MessageTransport,
    SentMessage,
    TransportError,
)
from .telegram import TelegramTransport

__all__ = [
    "BotIdentity",
    "ChatMemberStatus",
    "ChatType",
    "MessageTransport",
    "SentMessage",
    "TransportError",
    "TelegramTransport",
]
