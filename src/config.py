"""
LifeTune — Centralized configuration.

Loads all settings from .env and the process environment.
Every other module reads configuration through the `settings` singleton.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram front end (only needed when running the bot)
    TELEGRAM_BOT_TOKEN: str = ""

    # Security
    ALLOWED_USER_IDS: list[int] = []

    # Local key-value store (SQLite)
    DATABASE_PATH: str = "data/lifetune.db"

    # Where the advice API key comes from: "env" | "store"
    CREDENTIAL_BACKEND: str = "env"

    # AI advice client → proxy
    ADVICE_API_KEY: str = ""
    ADVICE_PROXY_URL: str = "https://lifetune.vercel.app/api/openai-proxy"
    ADVICE_MODEL: str = "gpt-3.5-turbo"
    ADVICE_MAX_TOKENS: int = 500
    ADVICE_TEMPERATURE: float = 0.7
    ADVICE_TIMEOUT_SECONDS: float = 30.0

    # Proxy → upstream chat-completion API (server side only)
    OPENAI_API_KEY: str = ""
    OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []


def _load_settings() -> Settings:
    """Build settings from the environment."""
    return Settings(
        TELEGRAM_BOT_TOKEN=os.getenv("TELEGRAM_BOT_TOKEN", ""),
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/lifetune.db"),
        CREDENTIAL_BACKEND=os.getenv("CREDENTIAL_BACKEND", "env"),
        ADVICE_API_KEY=os.getenv("ADVICE_API_KEY", ""),
        ADVICE_PROXY_URL=os.getenv(
            "ADVICE_PROXY_URL", "https://lifetune.vercel.app/api/openai-proxy",
        ),
        ADVICE_MODEL=os.getenv("ADVICE_MODEL", "gpt-3.5-turbo"),
        ADVICE_MAX_TOKENS=os.getenv("ADVICE_MAX_TOKENS", "500"),
        ADVICE_TEMPERATURE=os.getenv("ADVICE_TEMPERATURE", "0.7"),
        ADVICE_TIMEOUT_SECONDS=os.getenv("ADVICE_TIMEOUT_SECONDS", "30"),
        OPENAI_API_KEY=os.getenv("OPENAI_API_KEY", ""),
        OPENAI_API_URL=os.getenv(
            "OPENAI_API_URL", "https://api.openai.com/v1/chat/completions",
        ),
    )


# Singleton, imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
