"""
Chat orchestration.

The orchestrator owns the visible conversation and coordinates three
collaborators around it:

- a repository that loads and stores messages,
- a generation backend that produces assistant replies,
- an identity provider that says who is signed in.

The visible log is updated optimistically: a message shows up in the store
before it is persisted, and persistence failures never remove it. Generation
failures leave an apology in the log before the error reaches the caller.
"""

import asyncio
from datetime import datetime
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional

import structlog

from ..config import ChatSettings, get_settings
from ..domain.errors import GenerationFailed, HydrationFailed, NotAuthenticated
from ..domain.models import Message, MessageRole, MessageStatus, utcnow
from ..metrics import GENERATION_ERRORS, MESSAGES_SENT, PERSISTENCE_ERRORS, REPLIES_RECEIVED
from ..repositories.base import MessageRepository
from .identity import IdentityProvider
from .llm.base import GenerationAdapter
from .send_queue import BackgroundTasks, SendQueue
from .store import ConversationStore, Observable
from .windowing import window

logger = structlog.get_logger()

APOLOGY_MESSAGE = "Sorry, there was a problem processing your message. Please try again."


class ConversationState(str, Enum):
    UNINITIALIZED = "uninitialized"
    HYDRATING = "hydrating"
    READY = "ready"


class ChatOrchestrator:
    """Runs a single user's conversation."""

    def __init__(
        self,
        repository: MessageRepository,
        generation: GenerationAdapter,
        identity: IdentityProvider,
        store: Optional[ConversationStore] = None,
        settings: Optional[ChatSettings] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.generation = generation
        self.identity = identity
        self.store = store or ConversationStore()
        self.settings = settings or get_settings()
        self._clock = clock

        self._send_queue = SendQueue(enabled=self.settings.serialize_sends)
        self._background = BackgroundTasks()
        self._state = ConversationState.UNINITIALIZED
        self._hydrating = False
        self._watcher: Optional[asyncio.Task] = None
        self.user_id: Optional[str] = None
        self.hydration_error: Optional[HydrationFailed] = None
        # Messages created here that storage has not confirmed yet.
        self._local: List[Message] = []

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def messages(self) -> Observable[List[Message]]:
        return self.store.messages

    @property
    def busy(self) -> Observable[bool]:
        return self.store.busy

    async def initialize(self, user_id: str) -> None:
        """Load ``user_id``'s history into the store.

        Returns at once if a load is already in progress. A failed load is
        logged and leaves an empty, usable conversation; it never raises.
        """
        if self._hydrating:
            logger.debug("initialize_skipped", user_id=user_id, reason="hydration in progress")
            return

        self._hydrating = True
        self._state = ConversationState.HYDRATING
        await self._stop_watcher()
        self.user_id = user_id
        self.hydration_error = None
        self._local = []

        feed: Optional[AsyncIterator[List[Message]]] = None
        try:
            feed = self.repository.load_history(user_id)
            try:
                messages = await feed.__anext__()
            except StopAsyncIteration:
                messages = []
                feed = None
            self.store.replace_all(messages)
            logger.info("history_loaded", user_id=user_id, message_count=len(messages))
        except Exception as e:
            self.hydration_error = HydrationFailed(user_id, e)
            PERSISTENCE_ERRORS.labels(operation="load").inc()
            logger.error("hydration_failed", user_id=user_id, error=str(e))
            self.store.replace_all([])
            await self._close_feed(feed)
            feed = None
        finally:
            self._hydrating = False
            self._state = ConversationState.READY

        if feed is None:
            return
        if self.settings.live_history:
            self._watcher = asyncio.create_task(
                self._follow_history(user_id, feed), name=f"history-feed-{user_id}"
            )
        else:
            await self._close_feed(feed)

    async def send(self, text: str) -> None:
        """Send a user message and append the assistant's reply.

        Raises ``NotAuthenticated`` before touching the log when nobody is
        signed in, and ``GenerationFailed`` after an apology has been added to
        the log when no reply could be produced. Blank text is ignored.
        """
        user = self.identity.current_user()
        if user is None:
            logger.error("send_rejected", reason="no authenticated user")
            raise NotAuthenticated()

        content = (text or "").strip()
        if not content:
            return

        async with self._send_queue.acquire():
            await self._send(user.uid, content)

    async def _send(self, user_id: str, content: str) -> None:
        user_message = Message(
            user_id=user_id,
            content=content,
            role=MessageRole.USER,
            status=MessageStatus.SENDING,
            sent_at=self._timestamp(),
        )
        self._local.append(user_message)
        self.store.append(user_message)
        MESSAGES_SENT.inc()
        logger.info("user_message_added", user_id=user_id, length=len(content))

        await self._persist(user_message)

        self.store.set_busy(True)
        try:
            history = window(
                self.store.current(),
                max_turns=self.settings.history_window,
                threshold=self.settings.history_threshold,
            )
            provider_history = self.generation.to_provider_format(history)
            reply = await self.generation.send(content, provider_history)

            assistant_message = Message(
                user_id=user_id,
                content=reply,
                role=MessageRole.ASSISTANT,
                status=MessageStatus.SENT,
                sent_at=self._timestamp(),
            )
            self._local.append(assistant_message)
            self.store.append(assistant_message)
            REPLIES_RECEIVED.labels(provider=self.generation.provider_name).inc()
            logger.info(
                "assistant_reply_added",
                user_id=user_id,
                provider=self.generation.provider_name,
                context_messages=len(history),
            )
            await self._persist(assistant_message)
        except Exception as e:
            GENERATION_ERRORS.labels(provider=self.generation.provider_name).inc()
            logger.error(
                "generation_failed",
                user_id=user_id,
                provider=self.generation.provider_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            error_message = Message(
                user_id=user_id,
                content=APOLOGY_MESSAGE,
                role=MessageRole.ASSISTANT,
                status=MessageStatus.ERROR,
                sent_at=self._timestamp(),
            )
            self._local.append(error_message)
            self.store.append(error_message)
            await self._persist(error_message)
            raise GenerationFailed(e) from e
        finally:
            self.store.set_busy(False)

    def clear(self) -> None:
        """Empty the visible log. Stored history is left alone.

        With a live history feed the next snapshot from storage, usually the
        one triggered by the next save, brings the stored history back.
        """
        self._local = []
        self.store.clear()
        logger.info("conversation_cleared", user_id=self.user_id)

    def is_ready(self) -> bool:
        return self.identity.current_user() is not None and self.generation.is_configured()

    def current_messages(self) -> List[Message]:
        return self.store.current()

    async def wait_for_saves(self) -> None:
        """Wait for saves scheduled in the background to finish."""
        await self._background.drain()

    async def close(self) -> None:
        await self._stop_watcher()
        await self._background.drain()
        logger.info("orchestrator_closed", user_id=self.user_id)

    def _timestamp(self) -> datetime:
        now = self._clock()
        log = self.store.current()
        if log and now < log[-1].sent_at:
            return log[-1].sent_at
        return now

    async def _persist(self, message: Message) -> None:
        if self.settings.background_persistence:
            self._background.spawn(
                self._save_quietly(message), name=f"save-{message.role.value}"
            )
            return
        await self._save_quietly(message)

    async def _save_quietly(self, message: Message) -> None:
        # The message is already visible; a failed save only gets logged.
        try:
            stored = await self.repository.save(message)
        except Exception as e:
            PERSISTENCE_ERRORS.labels(operation="save").inc()
            logger.warning(
                "message_save_failed",
                user_id=message.user_id,
                message_role=message.role.value,
                message_status=message.status.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return
        self._forget_local(message)
        logger.debug("message_persisted", message_id=stored.id, message_role=stored.role.value)

    async def _follow_history(self, user_id: str, feed: AsyncIterator[List[Message]]) -> None:
        try:
            async for messages in feed:
                self.store.replace_all(self._merge_local(messages))
                logger.debug("history_updated", user_id=user_id, message_count=len(messages))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            PERSISTENCE_ERRORS.labels(operation="load").inc()
            logger.error("history_feed_failed", user_id=user_id, error=str(e))
            self.store.replace_all(self._merge_local([]))
        finally:
            await self._close_feed(feed)

    async def _stop_watcher(self) -> None:
        watcher, self._watcher = self._watcher, None
        if watcher is None or watcher.done():
            return
        watcher.cancel()
        try:
            await watcher
        except asyncio.CancelledError:
            pass

    def _forget_local(self, message: Message) -> None:
        self._local = [m for m in self._local if m is not message]

    def _merge_local(self, snapshot: List[Message]) -> List[Message]:
        """Snapshot from storage plus the local messages it does not contain yet."""
        stored = {(m.role, m.content, m.sent_at) for m in snapshot}
        pending = [m for m in self._local if (m.role, m.content, m.sent_at) not in stored]
        if not pending:
            return list(snapshot)
        return sorted([*snapshot, *pending], key=lambda m: m.sent_at)

    @staticmethod
    async def _close_feed(feed: Optional[AsyncIterator[List[Message]]]) -> None:
        aclose = getattr(feed, "aclose", None)
        if aclose is not None:
            await aclose()
