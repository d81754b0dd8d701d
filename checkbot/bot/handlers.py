"""Dispatch of incoming bot updates to checklist operations."""

from __future__ import annotations

import logging
import secrets
from typing import Any

from checkbot.checklist.extractor import extract_checkboxes, extract_inline_query_checkboxes
from checkbot.checklist.render import escape_html, render_placeholder, render_plain
from checkbot.codec.base62 import BASE62_ALPHABET
from checkbot.common.errors import ChecklistError, TransportFailure
from checkbot.common.messages import t, t_html
from checkbot.common.models import (
    SUGGESTED_CHECKED_BOXES,
    SUGGESTED_UNCHECKED_BOXES,
    ChecklistData,
    ChecklistMessageLocation,
    UnsentChecklistLocation,
    UserConfig,
)
from checkbot.common.store import UserConfigLookup
from checkbot.sync.orchestrator import ChecklistSynchronizer, url_keyboard
from checkbot.sync.reader import ForwardingTextReader
from checkbot.transport.base import ChatType, MessageTransport, ReplyMarkup, TransportError
from checkbot.transport.types import CallbackQuery, ChosenInlineResult, InlineQuery, Message, Update

logger = logging.getLogger(__name__)

CHECK_HASHTAG = "#check"
TOGGLE_PREFIX = "t_"
CHANNEL_SALT = "CHA"
CONFIG_PREFIX = "cfg"
INLINE_QUERY_WARNING_LENGTH = 250
SHARED_RESULT_ID = "checklist-shared"
PERSONAL_RESULT_ID = "checklist-personal"
CREATION_CHATS = {ChatType.PRIVATE.value, ChatType.GROUP.value, ChatType.SUPERGROUP.value}


def make_salt(length: int = 3) -> str:
    return "".join(secrets.choice(BASE62_ALPHABET) for _ in range(length))


def _selected(text: str, selected: bool) -> str:
    return f"• {text} •" if selected else text


def config_menu(config: UserConfig) -> tuple[str, ReplyMarkup]:
    text = (
        f"<b>{t('config')}</b>\n=============\n"
        f"<b>{t('default-checked-box')}</b>: {escape_html(config.default_checked_box)}\n"
        f"<b>{t('default-unchecked-box')}</b>: {escape_html(config.default_unchecked_box)}\n"
        "\n"
        f"<i>{t('if-a-box-is-present-bot-will-prefer')}</i>"
    )
    confirmation_key = "hide-edit-confirmation" if config.show_edit_confirmation else "show-edit-confirmation"
    keyboard = [
        [
            {"text": _selected(box, box == config.default_checked_box), "callback_data": f"{CONFIG_PREFIX}:c:{idx}"}
            for idx, box in enumerate(SUGGESTED_CHECKED_BOXES)
        ],
        [
            {"text": _selected(box, box == config.default_unchecked_box), "callback_data": f"{CONFIG_PREFIX}:u:{idx}"}
            for idx, box in enumerate(SUGGESTED_UNCHECKED_BOXES)
        ],
        [
            {
                "text": t(confirmation_key),
                "callback_data": f"{CONFIG_PREFIX}:e:{0 if config.show_edit_confirmation else 1}",
            }
        ],
    ]
    return text, {"inline_keyboard": keyboard}


class UpdateHandler:
    """Routes one update at a time; holds no per-request state."""

    def __init__(
        self,
        transport: MessageTransport,
        synchronizer: ChecklistSynchronizer,
        config_store: UserConfigLookup,
    ) -> None:
        self.transport = transport
        self.synchronizer = synchronizer
        self.config_store = config_store

    async def handle(self, update: Update) -> None:
        if update.message is not None:
            await self.on_message(update.message)
        elif update.channel_post is not None or update.edited_channel_post is not None:
            await self.on_channel_post(update.channel_post or update.edited_channel_post)
        elif update.inline_query is not None:
            await self.on_inline_query(update.inline_query)
        elif update.chosen_inline_result is not None:
            await self.on_chosen_inline_result(update.chosen_inline_result)
        elif update.callback_query is not None:
            await self.on_callback_query(update.callback_query)

    async def _sent_by_me(self, message: Message) -> bool:
        if message.via_bot is None:
            return False
        me = await self.transport.get_me()
        return message.via_bot.id == me.id

    async def _reply(self, message: Message, text: str, **kwargs: Any) -> None:
        await self.transport.send_message(message.chat.id, text, **kwargs)

    async def on_message(self, message: Message) -> None:
        user = message.from_user
        if user is None or message.text is None:
            return
        # answered through the chosen inline result instead
        if await self._sent_by_me(message):
            return

        config = self.config_store.get(user.id)
        command = message.command()
        if command is not None and command[0] == "start":
            if command[1].startswith(TOGGLE_PREFIX):
                await self.toggle(message, command[1], config)
            else:
                await self._reply(message, t("welcome"))
            return

        if message.chat.type not in CREATION_CHATS:
            return

        if command is not None and command[0] == "check":
            if not command[1]:
                await self._reply(message, t("check-command-usage"))
                return
            await self.create_from_message(message, command[1], config)
        elif command is not None and command[0] == "config":
            if message.chat.type == ChatType.PRIVATE.value:
                text, keyboard = config_menu(config)
                await self._reply(message, text, reply_markup=keyboard)
        elif CHECK_HASHTAG in message.text:
            await self.create_from_message(message, message.text, config)
        elif message.chat.type == ChatType.PRIVATE.value and extract_checkboxes(message.text, config).has_check_boxes:
            await self.create_from_message(message, message.text, config)

    async def create_from_message(self, message: Message, text: str, config: UserConfig) -> None:
        user = message.from_user
        source_chat_id = message.chat.id
        foreign_chat_id = None
        if message.has_protected_content:
            # the group blocks forwards, so the readable copy lives in the sender's private chat
            if user is None or user.id < 0 or message.sender_chat is not None:
                await self._reply(message, t("anonymous-admin-protected"))
                return
            foreign_chat_id = message.chat.id
            source_chat_id = user.id

        unsent = UnsentChecklistLocation(
            source_chat_id=source_chat_id,
            foreign_chat_id=foreign_chat_id,
            salt=make_salt(),
        )
        try:
            await self.synchronizer.create(unsent, extract_checkboxes(text, config))
        except TransportFailure as exc:
            logger.warning("Failed to create checklist in chat %s: %s", message.chat.id, exc.context)
            await self._reply(message, t("error-creating-checklist"))

    async def toggle(self, message: Message, param: str, config: UserConfig) -> None:
        user = message.from_user
        if user is None:
            return
        reader = ForwardingTextReader(self.transport, message.chat.id)
        try:
            result = await self.synchronizer.toggle(param, user.id, reader, config)
        except ChecklistError as exc:
            await self._reply(message, t_html(exc.message_key, **exc.context))
            return

        location = result.location
        is_private_checklist = location.source_chat_id == message.chat.id and not location.has_mirror
        if not is_private_checklist and config.show_edit_confirmation:
            keyboard = {
                "inline_keyboard": [[{"text": t("never-show-again"), "callback_data": f"{CONFIG_PREFIX}:e:0:n"}]]
            }
            await self.transport.send_message(
                message.chat.id,
                f"{result.data.checked_box_style} {t('done-press-back')}",
                reply_markup=keyboard,
                disable_notification=True,
            )
            return
        try:
            await self.transport.delete_message(message.chat.id, message.message_id)
        except TransportError as exc:
            logger.debug("Could not delete toggle command %s: %s", message.message_id, exc.description)

    async def on_channel_post(self, post: Message | None) -> None:
        if post is None or post.text is None or CHECK_HASHTAG not in post.text:
            return
        if await self._sent_by_me(post):
            return
        location = ChecklistMessageLocation(
            source_chat_id=post.chat.id,
            source_message_id=post.message_id,
            salt=CHANNEL_SALT,
        )
        try:
            await self.synchronizer.update(location, extract_checkboxes(post.text))
        except TransportFailure as exc:
            logger.warning("Failed to rewrite channel post %s: %s", post.message_id, exc.context)

    def _inline_article(
        self, result_id: str, title_key: str, data: ChecklistData, keyboard: ReplyMarkup
    ) -> dict[str, Any]:
        return {
            "type": "article",
            "id": result_id,
            "title": t(title_key),
            "description": render_plain(data),
            "input_message_content": {
                "message_text": render_placeholder(data),
                "parse_mode": "HTML",
                "link_preview_options": {"is_disabled": True},
            },
            "reply_markup": keyboard,
        }

    async def on_inline_query(self, query: InlineQuery) -> None:
        if not query.query:
            return
        data = extract_inline_query_checkboxes(query.query, self.config_store.get(query.from_user.id))
        if not data.lines:
            return
        me = await self.transport.get_me()
        keyboard = url_keyboard(f"💭 {t('generating-links')}... 🔗", f"tg://user?id={me.id}")
        button = None
        if len(query.query) >= INLINE_QUERY_WARNING_LENGTH:
            button = {"text": t("inline-too-long"), "start_parameter": "inline-too-long"}
        results = [
            self._inline_article(SHARED_RESULT_ID, "shared-checklist", data, keyboard),
            self._inline_article(PERSONAL_RESULT_ID, "personal-checklist", data, keyboard),
        ]
        await self.transport.answer_inline_query(query.id, results, cache_time=0, button=button)

    async def on_chosen_inline_result(self, chosen: ChosenInlineResult) -> None:
        if not chosen.result_id.startswith("checklist"):
            return
        if not chosen.inline_message_id:
            logger.error("Chosen inline result %s has no inline message id", chosen.result_id)
            return

        data = extract_inline_query_checkboxes(chosen.query, self.config_store.get(chosen.from_user.id))
        unsent = UnsentChecklistLocation(
            source_chat_id=chosen.from_user.id,
            inline_message_id=chosen.inline_message_id,
            is_personal=chosen.result_id == PERSONAL_RESULT_ID,
            salt=make_salt(),
        )
        try:
            await self.synchronizer.create(unsent, data)
        except TransportFailure as exc:
            logger.warning("Failed to create inline checklist: %s", exc.context)
            try:
                await self.transport.edit_inline_message_text(
                    chosen.inline_message_id, t("error-creating-checklist"), parse_mode=None
                )
            except TransportError as edit_exc:
                logger.warning("Could not report the failure inline: %s", edit_exc.description)

    async def on_callback_query(self, callback: CallbackQuery) -> None:
        parts = (callback.data or "").split(":")
        if parts[0] != CONFIG_PREFIX or len(parts) < 3:
            return
        user_id = callback.from_user.id
        config = self.config_store.get(user_id)
        changes = self._config_changes(parts[1], parts[2])
        if changes is None:
            await self.transport.answer_callback_query(callback.id, t("invalid-choice"))
            return
        if all(getattr(config, key) == value for key, value in changes.items()):
            await self.transport.answer_callback_query(callback.id, t("default-already-set"))
            return

        config = self.config_store.update(user_id, **changes)
        message = callback.message
        if message is not None:
            if len(parts) > 3 and parts[3] == "n":
                text = f"{t('i-will-not-show-again')}\n<i>{t('you-can-show-again-in-config')}</i>"
                await self.transport.edit_message_text(message.chat.id, message.message_id, text)
            else:
                text, keyboard = config_menu(config)
                await self.transport.edit_message_text(message.chat.id, message.message_id, text, reply_markup=keyboard)
        await self.transport.answer_callback_query(callback.id, t("updated-preference"))

    @staticmethod
    def _config_changes(kind: str, value: str) -> dict[str, Any] | None:
        if not value.isdigit():
            return None
        idx = int(value)
        if kind == "c" and idx < len(SUGGESTED_CHECKED_BOXES):
            return {"default_checked_box": SUGGESTED_CHECKED_BOXES[idx]}
        if kind == "u" and idx < len(SUGGESTED_UNCHECKED_BOXES):
            return {"default_unchecked_box": SUGGESTED_UNCHECKED_BOXES[idx]}
        if kind == "e" and idx in (0, 1):
            return {"show_edit_confirmation": bool(idx)}
        return None
