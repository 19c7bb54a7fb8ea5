"""Offline generation backend returning a fixed reply."""

from typing import Any, Dict, List, Sequence

import structlog

from ...domain.models import Message
from .base import GenerationAdapter

logger = structlog.get_logger()


class MockGenerationAdapter(GenerationAdapter):
    provider_name = "mock"

    def __init__(self, reply: str = "Mocked response from the assistant.") -> None:
        self.reply = reply
        self.calls: List[Dict[str, Any]] = []

    def to_provider_format(self, history: Sequence[Message]) -> List[Dict[str, str]]:
        return [
            {"role": self.provider_role(m.role), "content": m.content} for m in history
        ]

    async def send(self, text: str, provider_history: Sequence[Any]) -> str:
        self.calls.append({"text": text, "history": list(provider_history)})
        logger.debug("mock_generation", history_length=len(provider_history))
        return self.reply

    def is_configured(self) -> bool:
        return True
