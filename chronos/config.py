"""
Chronos — Centralized configuration.

Loads all settings from .env and validates required keys.
Core modules resolve these lazily so the task model stays usable without
a configured bot.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from chronos.core.clock import zone

# Load .env from project root (two levels up from chronos/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # LLM: provider-agnostic (gemini, anthropic, openai, cohere)
    LLM_PROVIDER: str = "gemini"
    LLM_MODEL: str = ""          # empty → smart default per provider
    LLM_API_KEY: str = ""        # empty → advice coach disabled
    ADVICE_MAX_TOKENS: int = 1024
    ADVICE_TEMPERATURE: float = 0.8

    # Durable store (SQLite key-value table)
    DATABASE_PATH: str = "data/chronos.db"
    STORAGE_KEY: str = "chronos_v2_data"

    # Persisted envelope metadata
    USER_NAME: str = "User"
    SCHEMA_VERSION: str = "2.1.0"

    # Security
    ALLOWED_USER_IDS: list[int] = []

    # Calendar-day boundary for "today" and the activity matrix
    TIMEZONE: str = "UTC"

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator("ADVICE_MAX_TOKENS", mode="before")
    @classmethod
    def parse_max_tokens(cls, v: str | int) -> int:
        return int(v)

    @field_validator("ADVICE_TEMPERATURE", mode="before")
    @classmethod
    def parse_temperature(cls, v: str | float) -> float:
        return float(v)

    @field_validator("TIMEZONE")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        try:
            zone(v)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            raise ValueError(f"Unknown TIMEZONE {v!r}") from exc
        return v

    @property
    def advice_enabled(self) -> bool:
        return bool(self.LLM_API_KEY) and not self.LLM_API_KEY.startswith("your-")


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        LLM_PROVIDER=os.getenv("LLM_PROVIDER", "gemini"),
        LLM_MODEL=os.getenv("LLM_MODEL", ""),
        LLM_API_KEY=os.getenv("LLM_API_KEY", ""),
        ADVICE_MAX_TOKENS=os.getenv("ADVICE_MAX_TOKENS", "1024"),
        ADVICE_TEMPERATURE=os.getenv("ADVICE_TEMPERATURE", "0.8"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/chronos.db"),
        STORAGE_KEY=os.getenv("STORAGE_KEY", "chronos_v2_data"),
        USER_NAME=os.getenv("USER_NAME", "User"),
        SCHEMA_VERSION=os.getenv("SCHEMA_VERSION", "2.1.0"),
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
        TIMEZONE=os.getenv("TIMEZONE", "UTC"),
    )


# Singleton, imported by the bot and lazily by core defaults as:
#   from chronos.config import settings
settings = _load_settings()
