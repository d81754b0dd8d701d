import html
import os
import re
import sys
import tempfile
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Add project root to python path for tests
ROOT_DIR = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT_DIR))

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")
os.environ.setdefault("CHECKBOX_HMAC_SECRET", "test-secret")
os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault("BOT_USERNAME", "checkbot")
os.environ.setdefault("CHECKBOT_DATA_DIR", tempfile.mkdtemp(prefix="checkbot-"))

from checkbot.codec.location import LocationCodec, LocationSigner  # noqa: E402
from checkbot.common.store import UserConfigStore  # noqa: E402
from checkbot.sync.orchestrator import ChecklistSynchronizer  # noqa: E402
from checkbot.transport.base import BotIdentity, SentMessage, TransportError  # noqa: E402

_TAG_RE = re.compile(r"<[^>]+>")


def visible_text(rendered: str) -> str:
    """What a user (or a forward) sees of an HTML message."""
    return html.unescape(_TAG_RE.sub("", rendered))


class FakeTransport:
    """In-memory chat platform keeping visible text and raw HTML per message."""

    def __init__(self) -> None:
        self.me = BotIdentity(id=999, username="checkbot")
        self.messages: dict[tuple[int, int], str] = {}
        self.html: dict[tuple[int, int], str] = {}
        self.markup: dict[tuple[int, int], dict | None] = {}
        self.inline_messages: dict[str, str] = {}
        self.member_status: dict[tuple[int, int], str] = {}
        self.chat_types: dict[int, str] = {}
        self.failures: dict[tuple[str, object], TransportError] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.inline_answers: list[tuple[str, list, dict | None]] = []
        self.callback_answers: list[tuple[str, str | None]] = []
        self._next_id = 100

    def fail(self, method: str, target: object, description: str = "Bad Request", code: int = 400) -> None:
        self.failures[(method, target)] = TransportError(description, code)

    def _check(self, method: str, target: object) -> None:
        self.calls.append((method, (target,)))
        error = self.failures.get((method, target))
        if error is not None:
            raise error

    def add_message(self, chat_id: int, text: str) -> int:
        self._next_id += 1
        self.messages[(chat_id, self._next_id)] = visible_text(text)
        self.html[(chat_id, self._next_id)] = text
        return self._next_id

    def sent_to(self, chat_id: int) -> list[str]:
        return [text for (chat, _), text in self.messages.items() if chat == chat_id]

    async def send_message(self, chat_id, text, *, parse_mode="HTML", reply_markup=None, disable_notification=False):
        self._check("send_message", chat_id)
        message_id = self.add_message(chat_id, text)
        self.markup[(chat_id, message_id)] = reply_markup
        return SentMessage(chat_id=chat_id, message_id=message_id, text=self.messages[(chat_id, message_id)])

    async def edit_message_text(self, chat_id, message_id, text, *, parse_mode="HTML", reply_markup=None):
        self._check("edit_message_text", chat_id)
        key = (chat_id, message_id)
        if key not in self.messages:
            raise TransportError("Bad Request: message to edit not found", 400)
        if self.html[key] == text and self.markup.get(key) == reply_markup:
            raise TransportError("Bad Request: message is not modified", 400)
        self.messages[key] = visible_text(text)
        self.html[key] = text
        self.markup[key] = reply_markup

    async def edit_inline_message_text(self, inline_message_id, text, *, parse_mode="HTML", reply_markup=None):
        self._check("edit_inline_message_text", inline_message_id)
        self.inline_messages[inline_message_id] = text

    async def forward_message(self, chat_id, from_chat_id, message_id, *, disable_notification=True):
        self._check("forward_message", from_chat_id)
        source = self.messages.get((from_chat_id, message_id))
        if source is None:
            raise TransportError("Bad Request: message to forward not found", 400)
        forwarded_id = self.add_message(chat_id, html.escape(source, quote=False))
        return SentMessage(chat_id=chat_id, message_id=forwarded_id, text=source)

    async def delete_message(self, chat_id, message_id):
        self._check("delete_message", chat_id)
        if self.messages.pop((chat_id, message_id), None) is None:
            raise TransportError("Bad Request: message to delete not found", 400)
        self.html.pop((chat_id, message_id), None)

    async def get_chat_member_status(self, chat_id, user_id):
        self._check("get_chat_member_status", chat_id)
        try:
            return self.member_status[(chat_id, user_id)]
        except KeyError:
            raise TransportError("Bad Request: chat not found", 400) from None

    async def get_chat_type(self, chat_id):
        self._check("get_chat_type", chat_id)
        return self.chat_types.get(chat_id, "supergroup")

    async def get_me(self):
        return self.me

    async def answer_inline_query(self, inline_query_id, results, *, cache_time=0, button=None):
        self.inline_answers.append((inline_query_id, results, button))

    async def answer_callback_query(self, callback_query_id, text=None):
        self.callback_answers.append((callback_query_id, text))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def codec() -> LocationCodec:
    return LocationCodec(LocationSigner("test-secret"))


@pytest.fixture
def synchronizer(transport: FakeTransport, codec: LocationCodec) -> ChecklistSynchronizer:
    return ChecklistSynchronizer(transport, codec, bot_username="checkbot")


@pytest.fixture
def config_store(tmp_path: Path) -> UserConfigStore:
    return UserConfigStore(tmp_path)
