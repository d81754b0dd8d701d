"""FastAPI application exposing the bot webhook and the mini-app checklist APIs."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apps.api.init_data import InitDataError, WebAppUser, validate_init_data
from checkbot.bot.handlers import UpdateHandler, make_salt
from checkbot.checklist.permissions import authorize
from checkbot.codec.location import LocationCodec, LocationSigner
from checkbot.common.errors import ChecklistError
from checkbot.common.messages import t
from checkbot.common.models import (
    ChecklistData,
    MiniAppLinesRequest,
    MiniAppRequest,
    UnsentChecklistLocation,
    UserConfig,
)
from checkbot.common.settings import load_settings
from checkbot.common.store import UserConfigLookup, UserConfigStore
from checkbot.sync.orchestrator import ChecklistSynchronizer
from checkbot.sync.reader import ForwardingTextReader
from checkbot.transport.base import TransportError
from checkbot.transport.telegram import TelegramTransport
from checkbot.transport.types import Update

settings = load_settings(dotenv_path=Path(__file__).resolve().parent / ".env")
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

transport = TelegramTransport(
    settings.bot_token,
    api_base=settings.telegram_api_base,
    timeout=settings.telegram_timeout,
)
codec = LocationCodec(LocationSigner(settings.hmac_secret))
synchronizer = ChecklistSynchronizer(
    transport,
    codec,
    bot_username=settings.bot_username,
    web_app_url=settings.web_app_url,
)
config_store = UserConfigStore(settings.data_dir)
update_handler = UpdateHandler(transport, synchronizer, config_store)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    await transport.aclose()


app = FastAPI(title="Checkbox Bot API", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_synchronizer() -> ChecklistSynchronizer:
    return synchronizer


def get_update_handler() -> UpdateHandler:
    return update_handler


def get_config_store() -> UserConfigLookup:
    return config_store


def get_web_app_user(request: MiniAppRequest) -> WebAppUser:
    try:
        return validate_init_data(request.init_data, settings.bot_token)
    except InitDataError as exc:
        raise HTTPException(status_code=400, detail="Bad request") from exc


@app.exception_handler(ChecklistError)
async def checklist_error_handler(_: Request, exc: ChecklistError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"ok": False, "description": t(exc.message_key, **exc.context)})


@app.get("/health")
def health() -> dict[str, object]:
    return {"ok": True, "result": "alive"}


@app.post("/telegram/webhook")
async def telegram_webhook(
    update: Update,
    x_telegram_bot_api_secret_token: str | None = Header(default=None),
    handler: UpdateHandler = Depends(get_update_handler),
) -> dict[str, bool]:
    if settings.webhook_secret and x_telegram_bot_api_secret_token != settings.webhook_secret:
        raise HTTPException(status_code=401, detail="Invalid webhook secret")
    try:
        await handler.handle(update)
    except (TransportError, ChecklistError):
        logger.exception("Failed to handle update %s", update.update_id)
    return {"ok": True}


def _default_styles(config: UserConfig, lines_request: MiniAppLinesRequest) -> ChecklistData:
    return ChecklistData(
        has_check_boxes=True,
        lines=lines_request.checklist_lines,
        checked_box_style=config.default_checked_box,
        unchecked_box_style=config.default_unchecked_box,
    )


@app.post("/message")
async def read_message(
    request: MiniAppRequest,
    sync: ChecklistSynchronizer = Depends(get_synchronizer),
    store: UserConfigLookup = Depends(get_config_store),
) -> dict[str, object]:
    user = get_web_app_user(request)
    location = sync.decode_location(request.location)
    reader = ForwardingTextReader(sync.transport, user.id)
    data = await sync.read(location, user.id, reader, store.get(user.id))
    return {"ok": True, "result": [line.model_dump(by_alias=True) for line in data.lines]}


@app.post("/update-message")
async def update_message(
    request: MiniAppLinesRequest,
    sync: ChecklistSynchronizer = Depends(get_synchronizer),
    store: UserConfigLookup = Depends(get_config_store),
) -> dict[str, bool]:
    user = get_web_app_user(request)
    location = sync.decode_location(request.location)
    await authorize(sync.transport, user.id, location)
    await sync.update(location, _default_styles(store.get(user.id), request))
    return {"ok": True}


@app.post("/create-message")
async def create_message(
    request: MiniAppLinesRequest,
    sync: ChecklistSynchronizer = Depends(get_synchronizer),
    store: UserConfigLookup = Depends(get_config_store),
) -> dict[str, bool]:
    user = get_web_app_user(request)
    location = sync.decode_location(request.location)
    # creation links are minted before any message exists
    if location.source_message_id != 0:
        raise ChecklistError("error-creating-checklist")
    await authorize(sync.transport, user.id, location)
    unsent = UnsentChecklistLocation(
        source_chat_id=location.source_chat_id,
        salt=make_salt(),
        foreign_chat_id=location.foreign_chat_id,
        inline_message_id=location.inline_message_id,
        is_personal=location.is_personal,
    )
    await sync.create(unsent, _default_styles(store.get(user.id), request))
    return {"ok": True}
