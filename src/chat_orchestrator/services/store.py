"""Observable in-memory conversation state."""

from typing import Callable, Generic, List, Sequence, TypeVar

import structlog

from ..domain.models import Message

logger = structlog.get_logger()

T = TypeVar("T")


class Observable(Generic[T]):
    """Holds a current value and pushes every new value to subscribers.

    New subscribers are called with the current value straight away.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it."""
        self._subscribers.append(callback)
        self._notify(callback, self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def set(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            self._notify(callback, value)

    @staticmethod
    def _notify(callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception as e:
            # Delivery continues past a failing subscriber.
            logger.error("subscriber_error", callback=repr(callback), error=str(e))


class ConversationStore:
    """Ordered message log plus the assistant-busy flag.

    A plain container: it stores what it is given and validates nothing.
    Every emitted list is a new object, so lists handed to subscribers are
    never changed afterwards.
    """

    def __init__(self) -> None:
        self.messages: Observable[List[Message]] = Observable([])
        self.busy: Observable[bool] = Observable(False)

    def replace_all(self, messages: Sequence[Message]) -> None:
        self.messages.set(list(messages))

    def append(self, message: Message) -> None:
        self.messages.set([*self.messages.value, message])

    def current(self) -> List[Message]:
        return self.messages.value

    def set_busy(self, busy: bool) -> None:
        self.busy.set(busy)

    def clear(self) -> None:
        self.replace_all([])
