from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

DEFAULT_TOPIC_URL = (
    "https://news.google.com/topics/CAAqJggKIiBDQkFTRWdvSUwyMHZNREpxYW5RU0FtVnVHZ0pWVXlnQVAB"
    "?hl=en-US&gl=US&ceid=US%3Aen"
)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class Settings:
    """Credentials and run settings, read from the environment (and a .env file)."""
    topic_url: str = DEFAULT_TOPIC_URL
    provider: str = "openai"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    google_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    serpapi_api_key: Optional[str] = None
    max_items: int = 5

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            topic_url=os.getenv("TOPIC_RSS_TOPIC_URL") or DEFAULT_TOPIC_URL,
            provider=(os.getenv("TOPIC_RSS_PROVIDER") or "openai").lower(),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL") or "gpt-4o-mini",
            google_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL") or "gemini-1.5-flash",
            serpapi_api_key=os.getenv("SERPAPI_API_KEY") or None,
            max_items=_env_int("TOPIC_RSS_MAX_ITEMS", 5),
        )

    @property
    def generator_key(self) -> Optional[str]:
        if self.provider == "openai":
            return self.openai_api_key
        return self.google_api_key

    @property
    def generator_model(self) -> str:
        return self.openai_model if self.provider == "openai" else self.gemini_model

    def require_generator_key(self) -> str:
        key = self.generator_key
        if not key:
            env = "OPENAI_API_KEY" if self.provider == "openai" else "GOOGLE_API_KEY (or GEMINI_API_KEY)"
            raise ConfigurationError(f"{env} is not set. Please export it and rerun.")
        return key
