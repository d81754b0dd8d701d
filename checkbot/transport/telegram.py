"""Bot HTTP API transport built on httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .base import BotIdentity, ReplyMarkup, SentMessage, TransportError

logger = logging.getLogger(__name__)


class TelegramTransport:
    """Calls the Bot API with JSON bodies; every failure becomes a TransportError."""

    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._base_url = f"{api_base.rstrip('/')}/bot{bot_token}"
        self._me: BotIdentity | None = None

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, **params: Any) -> Any:
        payload = {key: value for key, value in params.items() if value is not None}
        try:
            response = await self._client.post(f"{self._base_url}/{method}", json=payload)
            body = response.json()
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method} timed out") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise TransportError(f"{method} failed: {exc}") from exc

        if not isinstance(body, dict) or not body.get("ok"):
            description = str(body.get("description", "unknown error")) if isinstance(body, dict) else response.text
            error_code = body.get("error_code", response.status_code) if isinstance(body, dict) else response.status_code
            logger.debug("Bot API %s failed: %s (%s)", method, description, error_code)
            raise TransportError(description, error_code)
        return body.get("result")

    @staticmethod
    def _sent(result: dict[str, Any]) -> SentMessage:
        return SentMessage(
            chat_id=int(result["chat"]["id"]),
            message_id=int(result["message_id"]),
            text=result.get("text"),
            caption=result.get("caption"),
        )

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        parse_mode: str | None = "HTML",
        reply_markup: ReplyMarkup | None = None,
        disable_notification: bool = False,
    ) -> SentMessage:
        result = await self._call(
            "sendMessage",
            chat_id=chat_id,
            text=text,
            parse_mode=parse_mode,
            reply_markup=reply_markup,
            disable_notification=disable_notification or None,
            link_preview_options={"is_disabled": True},
        )
        return self._sent(result)

    async def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        *,
        parse_mode: str | None = "HTML",
        reply_markup: ReplyMarkup | None = None,
    ) -> None:
        await self._call(
            "editMessageText",
            chat_id=chat_id,
            message_id=message_id,
            text=text,
            parse_mode=parse_mode,
            reply_markup=reply_markup,
            link_preview_options={"is_disabled": True},
        )

    async def edit_inline_message_text(
        self,
        inline_message_id: str,
        text: str,
        *,
        parse_mode: str | None = "HTML",
        reply_markup: ReplyMarkup | None = None,
    ) -> None:
        await self._call(
            "editMessageText",
            inline_message_id=inline_message_id,
            text=text,
            parse_mode=parse_mode,
            reply_markup=reply_markup,
            link_preview_options={"is_disabled": True},
        )

    async def forward_message(
        self,
        chat_id: int,
        from_chat_id: int,
        message_id: int,
        *,
        disable_notification: bool = True,
    ) -> SentMessage:
        result = await self._call(
            "forwardMessage",
            chat_id=chat_id,
            from_chat_id=from_chat_id,
            message_id=message_id,
            disable_notification=disable_notification,
        )
        return self._sent(result)

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        await self._call("deleteMessage", chat_id=chat_id, message_id=message_id)

    async def get_chat_member_status(self, chat_id: int, user_id: int) -> str:
        result = await self._call("getChatMember", chat_id=chat_id, user_id=user_id)
        return str(result["status"])

    async def get_chat_type(self, chat_id: int) -> str:
        result = await self._call("getChat", chat_id=chat_id)
        return str(result["type"])

    async def get_me(self) -> BotIdentity:
        if self._me is None:
            result = await self._call("getMe")
            self._me = BotIdentity(id=int(result["id"]), username=str(result["username"]))
        return self._me

    async def answer_inline_query(
        self,
        inline_query_id: str,
        results: list[dict[str, Any]],
        *,
        cache_time: int = 0,
        button: dict[str, Any] | None = None,
    ) -> None:
        await self._call(
            "answerInlineQuery",
            inline_query_id=inline_query_id,
            results=results,
            cache_time=cache_time,
            is_personal=True,
            button=button,
        )

    async def answer_callback_query(self, callback_query_id: str, text: str | None = None) -> None:
        await self._call("answerCallbackQuery", callback_query_id=callback_query_id, text=text)
