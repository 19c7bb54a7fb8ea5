"""Message storage."""

from .base import MessageRepository
from .memory import InMemoryMessageRepository

__all__ = ["MessageRepository", "InMemoryMessageRepository"]
