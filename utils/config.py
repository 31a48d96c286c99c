"""Environment-driven settings for the application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_HISTORY_KEY = "neuroscan_history"
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
DEFAULT_ENHANCEMENT_DELAY = 1.5


@dataclass
class Settings:
    """Runtime configuration, usually built with `Settings.from_env()`.

    Attributes:
        openai_api_key: Key for the OpenAI client; may be None when a client is injected.
        openai_model: Model used for both classification and chat.
        database_dir: Directory holding the SQLite file with the history.
        history_key: Storage key under which the history array is persisted.
        max_upload_bytes: Uploads of this size or larger are rejected.
        enhancement_delay: Seconds spent in the cosmetic enhancement stage.
        log_level: Root logging level name.
    """

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-5"
    database_dir: Optional[str] = None
    history_key: str = DEFAULT_HISTORY_KEY
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    enhancement_delay: float = DEFAULT_ENHANCEMENT_DELAY
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        try:
            max_upload_bytes = int(os.getenv("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES))
            enhancement_delay = float(os.getenv("ENHANCEMENT_DELAY_SECONDS", DEFAULT_ENHANCEMENT_DELAY))
        except ValueError as exc:
            raise RuntimeError("MAX_UPLOAD_BYTES and ENHANCEMENT_DELAY_SECONDS must be numeric") from exc

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-5"),
            database_dir=os.getenv("DATABASE_DIR"),
            history_key=os.getenv("HISTORY_STORAGE_KEY", DEFAULT_HISTORY_KEY),
            max_upload_bytes=max_upload_bytes,
            enhancement_delay=enhancement_delay,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
