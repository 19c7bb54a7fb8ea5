"""History windowing applied before a log is sent to a generation backend."""

from typing import List, Optional, Sequence

from ..domain.models import Message, MessageRole


def window(
    log: Sequence[Message], max_turns: int = 6, threshold: Optional[int] = None
) -> List[Message]:
    """Return the part of ``log`` worth sending as context.

    Logs of at most ``threshold`` messages (``2 * max_turns`` by default) are
    returned whole. Longer logs are cut to their last ``max_turns`` messages,
    minus a leading assistant reply whose prompt fell outside the cut.
    The input is never modified.
    """
    if max_turns < 1:
        raise ValueError("max_turns must be at least 1")
    if threshold is None:
        threshold = 2 * max_turns

    if len(log) <= threshold:
        return list(log)

    recent = list(log[-max_turns:])
    if recent and recent[0].role is MessageRole.ASSISTANT:
        return recent[1:]
    return recent
