"""Prometheus counters for conversation activity."""

from prometheus_client import CollectorRegistry, Counter, generate_latest

# Registry for isolated metric collection
CUSTOM_REGISTRY = CollectorRegistry()

MESSAGES_SENT = Counter(
    "chat_messages_sent_total", "User messages accepted by the orchestrator",
    registry=CUSTOM_REGISTRY,
)
REPLIES_RECEIVED = Counter(
    "chat_replies_total", "Assistant replies returned by the generation backend",
    ["provider"], registry=CUSTOM_REGISTRY,
)
GENERATION_ERRORS = Counter(
    "chat_generation_errors_total", "Failed generation requests",
    ["provider"], registry=CUSTOM_REGISTRY,
)
PERSISTENCE_ERRORS = Counter(
    "chat_persistence_errors_total", "Failed history loads and message saves",
    ["operation"], registry=CUSTOM_REGISTRY,
)


def render_metrics() -> bytes:
    """Exposition-format dump of the chat registry."""
    return generate_latest(CUSTOM_REGISTRY)
