"""Settings loaded from environment variables.

Values are read from the host environment (prefixed with ``CHAT_``) or from a
``.env`` file in the working directory. Defaults let the orchestrator run
offline with the mock generation backend.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are a virtual assistant who is helpful and friendly. "
    "Always respond clearly and concisely. "
    "You specialize in helping with general questions, programming, and technology. "
    "Maintain a professional but approachable tone."
)


class ChatSettings(BaseSettings):
    """Configuration for the orchestrator and its generation backends."""

    # ---------------------------------------------------------------------
    # Generation backend
    provider: Literal["openai", "gemini", "mock"] = "mock"
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_output_tokens: int = 800
    temperature: float = 0.7

    openai_api_key: Optional[str] = None
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 60.0

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"

    mock_reply: str = "Mocked response from the assistant."

    # ---------------------------------------------------------------------
    # Conversation behaviour
    history_window: int = 6
    history_threshold: int = 8
    serialize_sends: bool = True
    background_persistence: bool = False
    live_history: bool = True

    # ---------------------------------------------------------------------
    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="CHAT_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache()
def get_settings() -> ChatSettings:
    """Return a cached settings instance."""
    return ChatSettings()
