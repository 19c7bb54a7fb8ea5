"""
Chat orchestration library.

Keeps an observable, ordered conversation log, windows it before asking a
generation backend (OpenAI, Gemini or an offline mock) for a reply, and
persists messages best-effort through a repository.

Typical wiring::

    orchestrator = build_orchestrator(identity=StaticIdentityProvider(user))
    orchestrator.messages.subscribe(render)
    await orchestrator.initialize(user.uid)
    await orchestrator.send("Hello")
"""

from typing import Optional

from .config import ChatSettings, get_settings
from .domain.errors import (
    ChatError,
    GenerationFailed,
    HydrationFailed,
    NotAuthenticated,
    PersistenceFailed,
    ProviderError,
)
from .domain.models import Message, MessageRole, MessageStatus, User
from .logging_config import configure_logging
from .metrics import render_metrics
from .repositories import InMemoryMessageRepository, MessageRepository
from .services.identity import IdentityProvider, StaticIdentityProvider
from .services.llm import GenerationAdapter, create_generation_adapter
from .services.orchestrator import APOLOGY_MESSAGE, ChatOrchestrator, ConversationState
from .services.store import ConversationStore, Observable
from .services.windowing import window

__version__ = "0.1.0"


def build_orchestrator(
    settings: Optional[ChatSettings] = None,
    repository: Optional[MessageRepository] = None,
    generation: Optional[GenerationAdapter] = None,
    identity: Optional[IdentityProvider] = None,
) -> ChatOrchestrator:
    """Wire an orchestrator from settings, filling in missing collaborators."""
    settings = settings or get_settings()
    return ChatOrchestrator(
        repository=repository or InMemoryMessageRepository(),
        generation=generation or create_generation_adapter(settings),
        identity=identity or StaticIdentityProvider(),
        settings=settings,
    )


__all__ = [
    "APOLOGY_MESSAGE",
    "ChatError",
    "ChatOrchestrator",
    "ChatSettings",
    "ConversationState",
    "ConversationStore",
    "GenerationAdapter",
    "GenerationFailed",
    "HydrationFailed",
    "IdentityProvider",
    "InMemoryMessageRepository",
    "Message",
    "MessageRepository",
    "MessageRole",
    "MessageStatus",
    "NotAuthenticated",
    "Observable",
    "PersistenceFailed",
    "ProviderError",
    "StaticIdentityProvider",
    "User",
    "build_orchestrator",
    "configure_logging",
    "create_generation_adapter",
    "get_settings",
    "render_metrics",
    "window",
]
