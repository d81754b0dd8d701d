"""Process configuration read once from the environment."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from checkbot.common.errors import ConfigurationError
from checkbot.common.paths import DATA_DIR


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    hmac_secret: str
    bot_token: str
    bot_username: str | None = None
    web_app_url: str | None = None
    telegram_api_base: str = "https://api.telegram.org"
    telegram_timeout: float = 10.0
    webhook_secret: str | None = None
    data_dir: Path = DATA_DIR
    log_level: str = "INFO"


def _required(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigurationError(f"{name} is not set")
    return value


def load_settings(dotenv_path: Path | None = None) -> Settings:
    """Build settings from the environment, reading ``dotenv_path`` first if given.

    Raises ConfigurationError when the HMAC secret or the bot token is missing.
    """
    if dotenv_path is not None:
        load_dotenv(dotenv_path=dotenv_path)
    return Settings(
        hmac_secret=_required("CHECKBOX_HMAC_SECRET"),
        bot_token=_required("BOT_TOKEN"),
        bot_username=os.getenv("BOT_USERNAME") or None,
        web_app_url=os.getenv("WEB_APP_URL") or None,
        telegram_api_base=os.getenv("TELEGRAM_API_BASE", "https://api.telegram.org"),
        telegram_timeout=float(os.getenv("TELEGRAM_TIMEOUT", "10")),
        webhook_secret=os.getenv("WEBHOOK_SECRET") or None,
        data_dir=Path(os.getenv("CHECKBOT_DATA_DIR", str(DATA_DIR))),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
