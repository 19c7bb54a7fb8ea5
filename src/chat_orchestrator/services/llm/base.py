"""Abstract generation backend interface. All providers must implement this."""

from abc import ABC, abstractmethod
from typing import Any, List, Sequence

from ...domain.models import Message, MessageRole

TRUNCATION_NOTE = (
    "\n\n[Note: Response truncated due to token limit. You can ask me to continue.]"
)


class GenerationAdapter(ABC):
    """Text-generation backend seen through a narrow interface."""

    provider_name: str = "generic"
    user_role: str = "user"
    assistant_role: str = "assistant"

    def provider_role(self, role: MessageRole) -> str:
        """Map our role vocabulary onto the provider's."""
        return self.user_role if role is MessageRole.USER else self.assistant_role

    @abstractmethod
    def to_provider_format(self, history: Sequence[Message]) -> List[Any]:
        """Convert history into the provider's native message list."""
        ...

    @abstractmethod
    async def send(self, text: str, provider_history: Sequence[Any]) -> str:
        """Submit ``text`` with prior context and return the reply text.

        Raises ``ProviderError`` carrying a user-readable message.
        """
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials and endpoint are present."""
        ...
