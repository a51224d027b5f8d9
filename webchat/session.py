"""
Chat Session

Controller between an interface (CLI, UI) and the core: tracks the active
conversation, guards the single in-flight webhook request with a busy flag,
and records every exchange in the conversation store.
"""

from __future__ import annotations

import logging

from webchat.conversations import Conversation, ConversationStore, Message, MessageType
from webchat.webhook import APOLOGY_MESSAGE, WebhookClient, WebhookError

logger = logging.getLogger(__name__)


class ChatSession:
    """
    One user's chat session over a shared conversation store.

    Usage:
        session = ChatSession(store, client)
        reply = await session.send("What's the weather like?")
        print(reply.text)
    """

    def __init__(self, store: ConversationStore, client: WebhookClient):
        self.store = store
        self.client = client
        self.busy = False

    @property
    def active_conversation(self) -> Conversation | None:
        active_id = self.store.get_active()
        return self.store.get(active_id) if active_id else None

    def start_new_chat(self) -> Conversation:
        conversation = self.store.create()
        self.store.set_active(conversation.id)
        return conversation

    def open_conversation(self, conversation_id: str) -> Conversation | None:
        conversation = self.store.get(conversation_id)
        if conversation is not None:
            self.store.set_active(conversation.id)
        return conversation

    def delete_conversation(self, conversation_id: str) -> None:
        self.store.delete(conversation_id)

    async def send(self, text: str) -> Message | None:
        """
        Send a user message and record the assistant reply.

        Blank input, or input while a request is already in flight, is
        ignored and returns None. Webhook failures are recorded as an
        apology reply rather than raised.
        """
        text = text.strip()
        if not text or self.busy:
            return None

        self.busy = True
        try:
            conversation_id = self.store.get_active()
            if conversation_id is None:
                conversation_id = self.store.new_id()
                self.store.set_active(conversation_id)

            self.store.append_message(conversation_id, text, MessageType.USER)
            try:
                reply = await self.client.send_message(conversation_id, text)
            except WebhookError as e:
                logger.error(
                    f"Error sending message to webhook: {e}",
                    extra={"conversation_id": conversation_id},
                )
                reply = APOLOGY_MESSAGE

            conversation = self.store.append_message(conversation_id, reply, MessageType.AI)
            return conversation.messages[-1]
        finally:
            self.busy = False
