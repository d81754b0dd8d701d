"""Authorization of a user against an already verified checklist location."""

from __future__ import annotations

import logging

from checkbot.common.errors import ChecklistPermissionError, PermissionReason
from checkbot.common.models import ChecklistMessageLocation
from checkbot.transport.base import ChatMemberStatus, ChatType, MessageTransport, TransportError

logger = logging.getLogger(__name__)

ALLOWED_STATUSES = {
    ChatMemberStatus.CREATOR.value,
    ChatMemberStatus.ADMINISTRATOR.value,
    ChatMemberStatus.MEMBER.value,
}


async def _member_status(transport: MessageTransport, chat_id: int, user_id: int) -> str:
    try:
        return await transport.get_chat_member_status(chat_id, user_id)
    except TransportError:
        # never reveal whether the chat exists
        return ChatMemberStatus.RESTRICTED.value


async def authorize(transport: MessageTransport, user_id: int, location: ChecklistMessageLocation) -> None:
    """Raise ChecklistPermissionError unless ``user_id`` may edit ``location``.

    The location is trusted as-is; its signature must have been checked.
    """
    target = location.foreign_chat_id if location.foreign_chat_id is not None else location.source_chat_id

    if target < 0 and target != user_id:
        status = await _member_status(transport, target, user_id)
        if status not in ALLOWED_STATUSES:
            raise ChecklistPermissionError(
                PermissionReason.NOT_ENOUGH_RIGHTS,
                message_key="no-rights-to-edit-group-checklist",
            )
        if status == ChatMemberStatus.MEMBER.value:
            try:
                chat_type = await transport.get_chat_type(target)
            except TransportError as exc:
                logger.info("Could not read chat type of %s: %s", target, exc)
                raise ChecklistPermissionError(PermissionReason.NOT_ADMINISTRATOR) from exc
            if chat_type == ChatType.CHANNEL.value:
                raise ChecklistPermissionError(PermissionReason.NOT_ADMINISTRATOR)
    elif target != user_id:
        if location.inline_message_id is None:
            raise ChecklistPermissionError(PermissionReason.NOT_ENOUGH_RIGHTS)
        # anyone holding a signed link to a shared inline copy may edit it
        if location.is_personal:
            raise ChecklistPermissionError(PermissionReason.PERSONAL_CHECKLIST)
