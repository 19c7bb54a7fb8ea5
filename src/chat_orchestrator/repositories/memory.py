"""In-memory repository implementation."""

import asyncio
from typing import AsyncIterator, Dict, List, Optional
from uuid import uuid4

import structlog

from ..domain.errors import PersistenceFailed
from ..domain.models import Message, MessageStatus
from .base import MessageRepository

logger = structlog.get_logger()

# Pushed to a feed queue to end the iteration.
_CLOSED = object()


class InMemoryMessageRepository(MessageRepository):
    """In-memory repository with live history feeds.

    ``fail_loads`` and ``fail_saves`` make every subsequent load or save fail,
    which is handy to exercise the orchestrator's recovery paths.
    """

    def __init__(self) -> None:
        self._messages: Dict[str, List[Message]] = {}
        self._feeds: Dict[str, List[asyncio.Queue]] = {}
        self._lock = asyncio.Lock()
        self.fail_loads = False
        self.fail_saves = False
        logger.info("repository_initialized")

    async def save(self, message: Message) -> Message:
        """Add a message to its user's history."""
        if self.fail_saves:
            logger.error("message_save_failed", user_id=message.user_id, reason="saves disabled")
            raise PersistenceFailed("Storage is not accepting writes")

        status = message.status
        if status is MessageStatus.SENDING:
            status = MessageStatus.SENT
        stored = message.model_copy(update={"id": uuid4().hex, "status": status})

        async with self._lock:
            history = self._messages.setdefault(stored.user_id, [])
            history.append(stored)
            snapshot = self._sorted(history)
            for queue in self._feeds.get(stored.user_id, []):
                queue.put_nowait(snapshot)

        logger.info(
            "message_saved",
            user_id=stored.user_id,
            message_id=stored.id,
            message_role=stored.role.value,
        )
        return stored

    async def load_history(self, user_id: str) -> AsyncIterator[List[Message]]:
        """Yield the current history, then every change until closed."""
        if self.fail_loads:
            logger.error("history_load_failed", user_id=user_id, reason="loads disabled")
            raise PersistenceFailed(f"Could not read history for user {user_id}")

        queue: asyncio.Queue = asyncio.Queue()
        async with self._lock:
            queue.put_nowait(self._sorted(self._messages.get(user_id, [])))
            self._feeds.setdefault(user_id, []).append(queue)
        logger.info("history_feed_opened", user_id=user_id)

        try:
            while True:
                snapshot = await queue.get()
                if snapshot is _CLOSED:
                    return
                yield snapshot
        finally:
            feeds = self._feeds.get(user_id, [])
            if queue in feeds:
                feeds.remove(queue)
            logger.info("history_feed_closed", user_id=user_id)

    async def get_messages(self, user_id: str) -> List[Message]:
        """One-shot read of a user's stored history."""
        async with self._lock:
            return self._sorted(self._messages.get(user_id, []))

    async def close(self, user_id: Optional[str] = None) -> None:
        """End the live feeds of one user, or of every user."""
        async with self._lock:
            user_ids = [user_id] if user_id is not None else list(self._feeds)
            for uid in user_ids:
                for queue in self._feeds.get(uid, []):
                    queue.put_nowait(_CLOSED)

    @staticmethod
    def _sorted(messages: List[Message]) -> List[Message]:
        return sorted(messages, key=lambda m: m.sent_at)
