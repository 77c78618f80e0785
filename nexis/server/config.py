# server/config.py
"""
Environment-sourced settings for the Nexis backend.

Values are read once (after loading .env files) into a frozen Settings
object. Routes receive it through the get_settings dependency.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# .../nexis/server
BASE_DIR = Path(__file__).resolve().parent
# .../nexis
ROOT_DIR = BASE_DIR.parent

DEFAULT_MODEL = "llama3-70b-8192"
DEFAULT_API_URL = "https://api.groq.com/openai/v1/chat/completions"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    port: int = 3000
    host: str = "0.0.0.0"
    groq_api_key: Optional[str] = None
    groq_model: str = DEFAULT_MODEL
    groq_api_url: str = DEFAULT_API_URL
    groq_timeout_seconds: float = Field(default=60.0, gt=0)
    # False restores the old behaviour of answering every upstream failure with 502
    propagate_upstream_status: bool = True
    log_level: str = "INFO"

    @field_validator("groq_api_key", mode="before")
    @classmethod
    def _blank_key_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        # uvicorn accepts the same names in lower case
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def has_api_key(self) -> bool:
        return bool(self.groq_api_key)

    @classmethod
    def from_env(cls, env: Optional[dict] = None) -> "Settings":
        """
        Build settings from environment variables.

        Unset variables fall back to the field defaults; an unset or blank
        GROQ_API_KEY is allowed here and reported per request instead.
        """
        env = os.environ if env is None else env

        raw = {
            "port": env.get("PORT"),
            "host": env.get("HOST"),
            "groq_api_key": env.get("GROQ_API_KEY"),
            "groq_model": env.get("GROQ_MODEL") or None,
            "groq_api_url": env.get("GROQ_API_URL") or None,
            "groq_timeout_seconds": env.get("GROQ_TIMEOUT_SECONDS"),
            "log_level": env.get("LOG_LEVEL"),
            "propagate_upstream_status": env.get("NEXIS_PROPAGATE_UPSTREAM_STATUS"),
        }

        return cls(**{k: v for k, v in raw.items() if v is not None})


def load_env_files() -> None:
    # project root first, then whatever .env sits in the working directory
    load_dotenv(ROOT_DIR.parent / ".env")
    load_dotenv()


@lru_cache()
def get_settings() -> Settings:
    load_env_files()
    return Settings.from_env()
