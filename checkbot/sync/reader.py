"""Reading a checklist's current text without any storage."""

from __future__ import annotations

import logging
from typing import Protocol

from checkbot.common.errors import ReadFailure
from checkbot.common.models import ChecklistMessageLocation
from checkbot.transport.base import MessageTransport, SentMessage, TransportError

logger = logging.getLogger(__name__)


class ChecklistTextReader(Protocol):
    async def fetch_current_text(self, location: ChecklistMessageLocation) -> str: ...


class ForwardingTextReader:
    """Reads the canonical copy by forwarding it into a scratch chat.

    The forwarded copy is deleted on every path; a failed delete is only logged.
    """

    def __init__(self, transport: MessageTransport, scratch_chat_id: int) -> None:
        self.transport = transport
        self.scratch_chat_id = scratch_chat_id

    async def fetch_current_text(self, location: ChecklistMessageLocation) -> str:
        try:
            forwarded = await self.transport.forward_message(
                self.scratch_chat_id,
                location.source_chat_id,
                location.source_message_id,
                disable_notification=True,
            )
        except TransportError as exc:
            raise ReadFailure("failed-to-read-checklist-error", {"message": exc.description}) from exc
        except Exception as exc:
            logger.exception("Failed to read checklist %s", location.source_chat_id)
            raise ReadFailure("failed-to-read-checklist-unknown") from exc

        try:
            text = forwarded.text if forwarded.text is not None else forwarded.caption
            if not text:
                raise ReadFailure()
            return text
        finally:
            await self._discard(forwarded)

    async def _discard(self, forwarded: SentMessage) -> None:
        try:
            await self.transport.delete_message(forwarded.chat_id, forwarded.message_id)
        except TransportError as exc:
            logger.warning(
                "Could not delete scratch copy %s in chat %s: %s",
                forwarded.message_id,
                forwarded.chat_id,
                exc.description,
            )
