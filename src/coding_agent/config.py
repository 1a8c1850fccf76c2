# config.py
# Process-wide settings. Loaded once at start-up and never mutated.

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "llama3"


def _env(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


class AppConfig(BaseModel):
    """Provider credentials and local backend settings."""

    model_config = ConfigDict(frozen=True)

    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    google_api_key: str | None = None
    deepseek_api_key: str | None = None
    brave_search_api_key: str | None = None
    ollama_base_url: str = DEFAULT_OLLAMA_BASE_URL
    ollama_model: str = DEFAULT_OLLAMA_MODEL

    @classmethod
    def load(cls, dotenv: bool = True) -> "AppConfig":
        """Read settings from the environment, after merging a local .env file."""
        if dotenv:
            load_dotenv()
        return cls(
            openai_api_key=_env("OPENAI_API_KEY"),
            anthropic_api_key=_env("ANTHROPIC_API_KEY"),
            google_api_key=_env("GOOGLE_API_KEY"),
            deepseek_api_key=_env("DEEPSEEK_API_KEY"),
            brave_search_api_key=_env("BRAVE_SEARCH_API_KEY"),
            ollama_base_url=_env("OLLAMA_BASE_URL") or DEFAULT_OLLAMA_BASE_URL,
            ollama_model=_env("OLLAMA_MODEL") or DEFAULT_OLLAMA_MODEL,
        )
