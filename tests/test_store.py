"""Tests for the observable conversation store and the message model."""

import pytest
from pydantic import ValidationError

from chat_orchestrator.domain.models import Message, MessageRole, MessageStatus
from chat_orchestrator.services.store import ConversationStore, Observable

from conftest import make_log


def test_late_subscriber_receives_current_value():
    observable = Observable(1)
    observable.set(2)

    received = []
    observable.subscribe(received.append)
    observable.set(3)

    assert received == [2, 3]


def test_unsubscribe_stops_delivery():
    observable = Observable("a")
    received = []
    unsubscribe = observable.subscribe(received.append)
    unsubscribe()
    observable.set("b")

    assert received == ["a"]


def test_failing_subscriber_does_not_block_others():
    observable = Observable(0)

    def broken(value):
        if value:
            raise RuntimeError("boom")

    received = []
    observable.subscribe(broken)
    observable.subscribe(received.append)
    observable.set(5)

    assert received == [0, 5]
    assert observable.value == 5


def test_append_emits_new_list_and_keeps_previous_intact():
    store = ConversationStore()
    emitted = []
    store.messages.subscribe(emitted.append)

    first, second = make_log(2)
    store.append(first)
    store.append(second)

    assert emitted == [[], [first], [first, second]]
    assert emitted[1] is not emitted[2]
    assert store.current() == [first, second]


def test_replace_all_and_clear():
    store = ConversationStore()
    log = make_log(4)
    source = list(log)
    store.replace_all(source)
    source.append(log[0])

    assert store.current() == log
    store.clear()
    assert store.current() == []


def test_busy_flag_emits_each_transition():
    store = ConversationStore()
    seen = []
    store.busy.subscribe(seen.append)
    store.set_busy(True)
    store.set_busy(False)

    assert seen == [False, True, False]


def test_message_content_is_trimmed():
    message = Message(user_id="u", content="  hello  ")
    assert message.content == "hello"
    assert message.role is MessageRole.USER
    assert message.status is MessageStatus.SENT
    assert message.id is None


@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
def test_blank_content_is_rejected(content):
    with pytest.raises(ValidationError):
        Message(user_id="u", content=content)


def test_user_id_is_required():
    with pytest.raises(ValidationError):
        Message(user_id="", content="hello")


def test_messages_are_immutable():
    message = Message(user_id="u", content="hello")
    with pytest.raises(ValidationError):
        message.status = MessageStatus.ERROR
