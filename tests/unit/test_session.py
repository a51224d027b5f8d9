"""Unit tests for the chat session controller."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from webchat.conversations import ConversationStore, MessageType
from webchat.session import ChatSession
from webchat.webhook import APOLOGY_MESSAGE, WebhookClient, WebhookError


@pytest.fixture
def client():
    client = AsyncMock()
    client.send_message = AsyncMock(return_value="Happy to help!")
    return client


@pytest.fixture
def session(store, client) -> ChatSession:
    return ChatSession(store, client)


@pytest.mark.asyncio
async def test_send_without_active_conversation_creates_one(session, store, client):
    reply = await session.send("  Plan my week  ")

    active_id = store.get_active()
    assert active_id is not None
    conversation = store.get(active_id)
    assert [(m.type, m.text) for m in conversation.messages] == [
        (MessageType.USER, "Plan my week"),
        (MessageType.AI, "Happy to help!"),
    ]
    assert conversation.title == "Plan my week"
    assert reply == conversation.messages[-1]
    client.send_message.assert_awaited_once_with(active_id, "Plan my week")
    assert session.busy is False


@pytest.mark.asyncio
async def test_send_uses_active_conversation(session, store, client):
    conversation = session.start_new_chat()

    await session.send("Hello")

    assert store.get_active() == conversation.id
    assert len(store.get(conversation.id).messages) == 2
    assert len(store.list()) == 1


@pytest.mark.asyncio
async def test_webhook_failure_records_apology(session, store, client):
    client.send_message.side_effect = WebhookError("HTTP error! status: 500", 500)

    reply = await session.send("Hello")

    assert reply.type is MessageType.AI
    assert reply.text == APOLOGY_MESSAGE
    conversation = store.get(store.get_active())
    assert conversation.messages[-1].text == APOLOGY_MESSAGE
    assert session.busy is False


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"<html>oops</html>", b'"caf\xe9"'])
async def test_malformed_reply_body_records_apology(store, body):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
    client = WebhookClient(
        "https://hooks.example.com/chat",
        http_client=httpx.AsyncClient(transport=transport),
    )
    session = ChatSession(store, client)

    reply = await session.send("hello")

    assert reply.text == APOLOGY_MESSAGE
    conversation = store.get(store.get_active())
    assert [(m.type, m.text) for m in conversation.messages] == [
        (MessageType.USER, "hello"),
        (MessageType.AI, APOLOGY_MESSAGE),
    ]
    assert session.busy is False


@pytest.mark.asyncio
async def test_unexpected_error_still_clears_busy(session, client):
    client.send_message.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await session.send("Hello")

    assert session.busy is False


@pytest.mark.asyncio
async def test_blank_input_is_ignored(session, store, client):
    assert await session.send("   ") is None

    assert store.list() == []
    client.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_second_send_while_busy_is_ignored(session, store, client):
    release = asyncio.Event()

    async def slow_reply(session_id: str, text: str) -> str:
        await release.wait()
        return "done"

    client.send_message.side_effect = slow_reply

    first = asyncio.create_task(session.send("first"))
    await asyncio.sleep(0)
    assert session.busy is True
    assert await session.send("second") is None

    release.set()
    reply = await first

    assert reply.text == "done"
    assert client.send_message.await_count == 1
    assert [m.text for m in store.get(store.get_active()).messages] == ["first", "done"]


def test_open_and_delete_conversation(store, client):
    session = ChatSession(store, client)
    conversation = store.create()

    assert session.open_conversation("conversation-missing") is None
    assert session.open_conversation(conversation.id) == conversation
    assert session.active_conversation == conversation

    session.delete_conversation(conversation.id)

    assert session.active_conversation is None
    assert store.get_active() is None


def test_session_over_reloaded_store(storage, client):
    session = ChatSession(ConversationStore(storage), client)
    conversation = session.start_new_chat()

    assert ConversationStore(storage).get(conversation.id) == conversation
