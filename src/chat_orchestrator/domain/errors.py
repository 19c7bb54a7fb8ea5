"""Exceptions raised by the chat orchestrator and its adapters."""

from typing import Optional


class ChatError(Exception):
    """Base class for every error raised by this package."""


class NotAuthenticated(ChatError):
    """Raised when an operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message)


class PersistenceFailed(ChatError):
    """Raised by a repository when a load or save cannot be completed."""


class HydrationFailed(ChatError):
    """Loading a user's history failed; the conversation starts empty."""

    def __init__(self, user_id: str, cause: Optional[BaseException] = None) -> None:
        self.user_id = user_id
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Could not load history for user {user_id}{detail}")


class ProviderError(ChatError):
    """A generation backend failed. The message is safe to show to users."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GenerationFailed(ChatError):
    """Raised by ``send`` after the failure has been recorded in the log."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Generation failed: {cause}")

    @property
    def user_message(self) -> str:
        """Readable text for a transient banner."""
        if isinstance(self.cause, ProviderError):
            return str(self.cause)
        return "Error processing the message. Please try again."
