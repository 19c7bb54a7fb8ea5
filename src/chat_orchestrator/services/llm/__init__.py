"""Generation backend factory."""

from ...config import ChatSettings
from .base import GenerationAdapter
from .mock import MockGenerationAdapter


def create_generation_adapter(settings: ChatSettings) -> GenerationAdapter:
    """Return the backend named by ``settings.provider``."""
    if settings.provider == "openai":
        from .openai_chat import OpenAIGenerationAdapter
        return OpenAIGenerationAdapter(
            api_key=settings.openai_api_key,
            api_url=settings.openai_api_url,
            model=settings.openai_model,
            system_prompt=settings.system_prompt,
            max_tokens=settings.max_output_tokens,
            temperature=settings.temperature,
            timeout=settings.openai_timeout,
        )
    if settings.provider == "gemini":
        from .gemini import GeminiGenerationAdapter
        return GeminiGenerationAdapter(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model,
            system_prompt=settings.system_prompt,
            max_output_tokens=settings.max_output_tokens,
            temperature=settings.temperature,
        )
    if settings.provider == "mock":
        return MockGenerationAdapter(reply=settings.mock_reply)
    raise ValueError(f"Unknown generation provider: {settings.provider}")


__all__ = ["GenerationAdapter", "MockGenerationAdapter", "create_generation_adapter"]
