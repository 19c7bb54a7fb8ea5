"""Base repository interface."""

from abc import ABC, abstractmethod
from typing import AsyncIterator, List

from ..domain.models import Message


class MessageRepository(ABC):
    """Abstract base class for durable message storage."""

    @abstractmethod
    def load_history(self, user_id: str) -> AsyncIterator[List[Message]]:
        """Live feed of a user's history.

        Each item is the user's complete history ordered by ``sent_at``. The
        feed yields again whenever the stored history changes. Errors are
        raised from the iterator.
        """
        pass

    @abstractmethod
    async def save(self, message: Message) -> Message:
        """Store one message and return the stored copy, ``id`` assigned."""
        pass
