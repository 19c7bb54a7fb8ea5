"""Shared fakes and fixtures for orchestrator tests."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence

import pytest

from chat_orchestrator.config import ChatSettings
from chat_orchestrator.domain.models import Message, MessageRole, User
from chat_orchestrator.repositories.base import MessageRepository
from chat_orchestrator.services.identity import StaticIdentityProvider
from chat_orchestrator.services.llm.base import GenerationAdapter
from chat_orchestrator.services.orchestrator import ChatOrchestrator

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_log(count: int, user_id: str = "user-1", first_role: MessageRole = MessageRole.USER) -> List[Message]:
    """Alternating user/assistant messages, one minute apart."""
    other = MessageRole.ASSISTANT if first_role is MessageRole.USER else MessageRole.USER
    return [
        Message(
            id=f"m{i}",
            user_id=user_id,
            content=f"message {i}",
            role=first_role if i % 2 == 0 else other,
            sent_at=BASE_TIME + timedelta(minutes=i),
        )
        for i in range(count)
    ]


class FakeRepository(MessageRepository):
    """Records saves; optionally fails or blocks."""

    def __init__(self, history: Optional[List[Message]] = None) -> None:
        self.history = list(history or [])
        self.saved: List[Message] = []
        self.save_attempts = 0
        self.load_calls = 0
        self.load_error: Optional[Exception] = None
        self.save_error: Optional[Exception] = None
        self.load_gate: Optional[asyncio.Event] = None
        self.save_gate: Optional[asyncio.Event] = None

    async def load_history(self, user_id: str):
        self.load_calls += 1
        if self.load_gate is not None:
            await self.load_gate.wait()
        if self.load_error is not None:
            raise self.load_error
        yield [m for m in self.history if m.user_id == user_id]

    async def save(self, message: Message) -> Message:
        self.save_attempts += 1
        if self.save_gate is not None:
            await self.save_gate.wait()
        if self.save_error is not None:
            raise self.save_error
        stored = message.model_copy(update={"id": f"saved-{self.save_attempts}"})
        self.saved.append(stored)
        return stored


class ScriptedGeneration(GenerationAdapter):
    """Returns ``reply`` or raises ``error``; can wait on ``gate`` first."""

    provider_name = "scripted"

    def __init__(self, reply: str = "Hi there!", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.configured = True
        self.numbered = False
        self.gate: Optional[asyncio.Event] = None
        self.calls: List[dict] = []

    def to_provider_format(self, history: Sequence[Message]) -> List[Any]:
        return [{"role": self.provider_role(m.role), "content": m.content} for m in history]

    async def send(self, text: str, provider_history: Sequence[Any]) -> str:
        self.calls.append({"text": text, "history": list(provider_history)})
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if self.numbered:
            return f"{self.reply} #{len(self.calls)}"
        return self.reply

    def is_configured(self) -> bool:
        return self.configured


@pytest.fixture
def settings() -> ChatSettings:
    return ChatSettings(
        provider="mock",
        live_history=False,
        serialize_sends=True,
        background_persistence=False,
        history_window=6,
        history_threshold=8,
    )


@pytest.fixture
def user() -> User:
    return User(uid="user-1", email="ada@example.com", name="Ada")


@pytest.fixture
def identity(user) -> StaticIdentityProvider:
    return StaticIdentityProvider(user)


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def generation() -> ScriptedGeneration:
    return ScriptedGeneration()


@pytest.fixture
def orchestrator(repository, generation, identity, settings) -> ChatOrchestrator:
    return ChatOrchestrator(
        repository=repository,
        generation=generation,
        identity=identity,
        settings=settings,
    )
