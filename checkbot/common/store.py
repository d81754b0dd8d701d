"""JSON-file store for per-user configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from checkbot.common.io import ensure_dir, read_json, write_json
from checkbot.common.models import UserConfig
from checkbot.common.paths import DATA_DIR, USERS_DIR_NAME

logger = logging.getLogger(__name__)


class UserConfigLookup(Protocol):
    def get(self, user_id: int) -> UserConfig: ...

    def update(self, user_id: int, **changes: Any) -> UserConfig: ...


class UserConfigStore:
    """One ``<user_id>.json`` file per user; missing users get the defaults."""

    def __init__(self, data_dir: Path = DATA_DIR) -> None:
        self.users_dir = data_dir / USERS_DIR_NAME
        ensure_dir(self.users_dir)

    def config_path(self, user_id: int) -> Path:
        return self.users_dir / f"{user_id}.json"

    def get(self, user_id: int) -> UserConfig:
        path = self.config_path(user_id)
        if not path.exists():
            return UserConfig()
        try:
            return UserConfig.model_validate(read_json(path))
        except (ValueError, ValidationError):
            logger.warning("Ignoring unreadable config for user %s", user_id)
            return UserConfig()

    def update(self, user_id: int, **changes: Any) -> UserConfig:
        config = self.get(user_id).model_copy(update=changes)
        write_json(self.config_path(user_id), config.model_dump(mode="json"))
        return config
