"""Create and update every copy of a checklist from its signed location."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from urllib.parse import quote

from checkbot.checklist.extractor import extract_checkboxes
from checkbot.checklist.permissions import authorize
from checkbot.checklist.render import escape_html, render_placeholder, render_plain, render_rich
from checkbot.codec.base62 import encode_base36
from checkbot.codec.deep_link import decode_params, encode_deep_link_url, encode_params, encode_start_app_url
from checkbot.codec.location import LocationCodec
from checkbot.common.errors import InvalidIndexError, TransportFailure
from checkbot.common.messages import t
from checkbot.common.models import (
    ChecklistData,
    ChecklistMessageLocation,
    UnsentChecklistLocation,
    UserConfig,
)
from checkbot.sync.reader import ChecklistTextReader
from checkbot.transport.base import MessageTransport, ReplyMarkup, TransportError

logger = logging.getLogger(__name__)

EDIT_APP_NAME = "edit_checklist"
EDIT_BUTTON_TEXT = "✏️"


@dataclass
class CreateResult:
    data: ChecklistData
    location: ChecklistMessageLocation | None = None
    fallback_sent: bool = False


@dataclass
class ToggleResult:
    location: ChecklistMessageLocation
    data: ChecklistData
    line_index: int


def toggle_line(data: ChecklistData, line_index: int) -> None:
    if line_index >= len(data.lines) or not data.lines[line_index].has_check_box:
        raise InvalidIndexError(line_index)
    line = data.lines[line_index]
    line.is_checked = not line.is_checked


def url_keyboard(text: str, url: str) -> ReplyMarkup:
    return {"inline_keyboard": [[{"text": text, "url": url}]]}


class ChecklistSynchronizer:
    """Drives creation and toggling across the canonical copy and its mirrors."""

    def __init__(
        self,
        transport: MessageTransport,
        codec: LocationCodec,
        bot_username: str | None = None,
        web_app_url: str | None = None,
    ) -> None:
        self.transport = transport
        self.codec = codec
        self.web_app_url = web_app_url
        self._bot_username = bot_username

    async def bot_username(self) -> str:
        if self._bot_username is None:
            self._bot_username = (await self.transport.get_me()).username
        return self._bot_username

    def decode_location(self, param: str) -> ChecklistMessageLocation:
        return self.codec.decode(decode_params(param))

    async def create(self, unsent: UnsentChecklistLocation, data: ChecklistData) -> CreateResult:
        """Send placeholders, then edit them once every message id is known.

        When the canonical chat refuses the bot, a plain-text copy goes to the
        mirror instead so the list is not lost.
        """
        placeholder = render_placeholder(data)
        try:
            sent = await self.transport.send_message(unsent.source_chat_id, placeholder)
        except TransportError as exc:
            if exc.is_forbidden and (unsent.foreign_chat_id is not None or unsent.inline_message_id is not None):
                await self._send_fallback(unsent, data)
                return CreateResult(data=data, fallback_sent=True)
            raise TransportFailure(context={"message": exc.description}) from exc

        foreign_message_id = None
        if unsent.foreign_chat_id is not None:
            try:
                foreign = await self.transport.send_message(unsent.foreign_chat_id, placeholder)
            except TransportError as exc:
                raise TransportFailure(context={"message": exc.description}) from exc
            foreign_message_id = foreign.message_id

        location = ChecklistMessageLocation(
            source_chat_id=unsent.source_chat_id,
            source_message_id=sent.message_id,
            salt=unsent.salt,
            foreign_chat_id=unsent.foreign_chat_id,
            foreign_message_id=foreign_message_id,
            inline_message_id=unsent.inline_message_id,
            is_personal=unsent.is_personal,
        )
        await self.update(location, data)
        return CreateResult(data=data, location=location)

    async def _send_fallback(self, unsent: UnsentChecklistLocation, data: ChecklistData) -> None:
        reason = "you-must-start-for-inline-mode" if unsent.inline_message_id else "you-must-start-for-protected-content"
        text = (
            f"{t(reason)}!\n"
            f"<i>📋 {t('use-text-to-recreate-checklist')}</i>:\n\n"
            f"<code>{escape_html(render_plain(data))}</code>"
        )
        keyboard = url_keyboard(f"🤖 {t('click-here-to-start')}", f"https://t.me/{await self.bot_username()}")
        try:
            if unsent.inline_message_id is not None:
                await self.transport.edit_inline_message_text(unsent.inline_message_id, text, reply_markup=keyboard)
            else:
                await self.transport.send_message(unsent.foreign_chat_id, text, reply_markup=keyboard)
        except TransportError as exc:
            raise TransportFailure(context={"message": exc.description}) from exc

    async def toggle_url_builder(self, location: ChecklistMessageLocation) -> Callable[[int], str]:
        username = await self.bot_username()
        fields = self.codec.encode(location)
        return lambda idx: encode_deep_link_url(username, [*fields, encode_base36(idx)])

    async def edit_keyboard(
        self,
        location: ChecklistMessageLocation,
        data: ChecklistData,
        *,
        canonical: bool,
    ) -> ReplyMarkup:
        fields = self.codec.encode(location)
        # web-app buttons only work in private chats
        if canonical and location.source_chat_id > 0 and self.web_app_url:
            url = (
                f"https://{self.web_app_url}/?tgWebAppStartParam={encode_params(fields)}"
                f"&list={quote(data.model_dump_json(by_alias=True), safe='')}"
            )
            return {"inline_keyboard": [[{"text": EDIT_BUTTON_TEXT, "web_app": {"url": url}}]]}
        username = await self.bot_username()
        return url_keyboard(EDIT_BUTTON_TEXT, encode_start_app_url(username, EDIT_APP_NAME, fields))

    async def update(self, location: ChecklistMessageLocation, data: ChecklistData) -> None:
        """Edit the canonical copy and, best effort, its mirror.

        Only a failed canonical edit is raised; mirrors may already be gone.
        """
        text = render_rich(data, await self.toggle_url_builder(location))
        canonical_keyboard = await self.edit_keyboard(location, data, canonical=True)
        mirror_keyboard = await self.edit_keyboard(location, data, canonical=False) if location.has_mirror else None

        mirrors: list[Awaitable[None]] = []
        if location.inline_message_id is not None:
            mirrors.append(
                self.transport.edit_inline_message_text(location.inline_message_id, text, reply_markup=mirror_keyboard)
            )
        elif location.foreign_chat_id is not None and location.foreign_message_id is not None:
            mirrors.append(
                self.transport.edit_message_text(
                    location.foreign_chat_id, location.foreign_message_id, text, reply_markup=mirror_keyboard
                )
            )
        canonical = self.transport.edit_message_text(
            location.source_chat_id,
            location.source_message_id,
            text,
            reply_markup=canonical_keyboard,
        )

        canonical_result, *mirror_results = await asyncio.gather(canonical, *mirrors, return_exceptions=True)
        for result in mirror_results:
            if isinstance(result, BaseException):
                logger.debug("Mirror of checklist %s not updated: %s", location.source_message_id, result)

        if isinstance(canonical_result, TransportError):
            if canonical_result.is_not_modified:
                return
            raise TransportFailure(context={"message": canonical_result.description}) from canonical_result
        if isinstance(canonical_result, BaseException):
            raise canonical_result

    async def read(
        self,
        location: ChecklistMessageLocation,
        user_id: int,
        reader: ChecklistTextReader,
        config: UserConfig | None = None,
    ) -> ChecklistData:
        """Authorize ``user_id`` and parse the canonical copy's current text."""
        await authorize(self.transport, user_id, location)
        return extract_checkboxes(await reader.fetch_current_text(location), config)

    async def toggle(
        self,
        param: str,
        user_id: int,
        reader: ChecklistTextReader,
        config: UserConfig | None = None,
    ) -> ToggleResult:
        """Flip one line addressed by a toggle deep-link parameter.

        Two concurrent toggles of the same line may both see it unchecked;
        the last edit wins.
        """
        location, line_index = self.codec.decode_with_index(decode_params(param))
        data = await self.read(location, user_id, reader, config)
        toggle_line(data, line_index)
        await self.update(location, data)
        return ToggleResult(location=location, data=data, line_index=line_index)
