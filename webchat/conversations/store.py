"""Storage utilities for persisted chat conversations."""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any

from pydantic import ValidationError

from webchat.conversations.models import (
    DEFAULT_PREVIEW,
    DEFAULT_TITLE,
    Conversation,
    Message,
    MessageType,
    utc_timestamp,
)
from webchat.local_storage import CONVERSATIONS_KEY, LocalStorage

logger = logging.getLogger(__name__)

ID_PREFIX = "conversation-"
PREVIEW_MAX_CHARS = 30
TITLE_MAX_WORDS = 5
TITLE_MAX_CHARS = 35
ELLIPSIS = "..."


def derive_preview(text: str) -> str:
    """First 30 characters of ``text``, with an ellipsis when truncated."""
    if len(text) > PREVIEW_MAX_CHARS:
        return text[:PREVIEW_MAX_CHARS] + ELLIPSIS
    return text


def derive_title(text: str) -> str | None:
    """
    Build a sidebar title from the opening words of a message.

    Returns None when the message has no words to build a title from.
    """
    words = text.split()[:TITLE_MAX_WORDS]
    if not words:
        return None
    first, rest = words[0], words[1:]
    title = " ".join([first[:1].upper() + first[1:], *(word.lower() for word in rest)])
    if len(title) > TITLE_MAX_CHARS:
        return title[:TITLE_MAX_CHARS] + ELLIPSIS
    return title


def _is_conversation_shaped(record: Any) -> bool:
    if not isinstance(record, dict):
        return False
    conversation_id = record.get("id")
    if not isinstance(conversation_id, str) or not conversation_id:
        return False
    return isinstance(record.get("messages"), list)


class ConversationStore:
    """
    Single source of truth for the conversation list.

    Every mutating operation rewrites the full serialized list to storage
    before returning. The active conversation pointer lives in memory only.
    """

    def __init__(self, storage: LocalStorage):
        self._storage = storage
        self._lock = threading.RLock()
        self._conversations: list[Conversation] = []
        self._active_id: str | None = None
        self._last_id_ms = 0
        self.reload()

    # ---- persistence ----

    def reload(self) -> None:
        """Rehydrate the in-memory list from storage, dropping malformed records."""
        with self._lock:
            self._conversations = self._load()

    def _load(self) -> list[Conversation]:
        raw = self._storage.get_item(CONVERSATIONS_KEY)
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored conversations are not valid JSON; starting empty")
            return []
        if not isinstance(records, list):
            logger.warning("Stored conversations are not a list; starting empty")
            return []

        conversations: list[Conversation] = []
        seen: set[str] = set()
        for record in records:
            conversation = self._parse_record(record)
            if conversation is None or conversation.id in seen:
                continue
            seen.add(conversation.id)
            conversations.append(conversation)

        dropped = len(records) - len(conversations)
        if dropped:
            logger.debug(
                f"Dropped {dropped} malformed stored conversation(s)",
                extra={"loaded": len(conversations), "dropped": dropped},
            )
        return conversations

    @staticmethod
    def _parse_record(record: Any) -> Conversation | None:
        if not _is_conversation_shaped(record):
            return None
        messages = []
        for item in record["messages"]:
            try:
                messages.append(Message.model_validate(item))
            except ValidationError:
                continue
        fields = {
            key: record[key]
            for key in ("title", "preview", "timestamp")
            if isinstance(record.get(key), str)
        }
        try:
            return Conversation(id=record["id"], messages=messages, **fields)
        except ValidationError:
            return None

    def _persist(self) -> None:
        payload = [conversation.model_dump(mode="json") for conversation in self._conversations]
        self._storage.set_item(CONVERSATIONS_KEY, json.dumps(payload, ensure_ascii=False))

    # ---- identifiers ----

    def new_id(self) -> str:
        """Issue a fresh time-based id that has never been handed out or stored."""
        with self._lock:
            candidate = max(int(time.time() * 1000), self._last_id_ms + 1)
            taken = {conversation.id for conversation in self._conversations}
            while f"{ID_PREFIX}{candidate}" in taken:
                candidate += 1
            self._last_id_ms = candidate
            return f"{ID_PREFIX}{candidate}"

    # ---- CRUD ----

    def _insert(self, conversation_id: str) -> Conversation:
        conversation = Conversation(
            id=conversation_id,
            title=DEFAULT_TITLE,
            preview=DEFAULT_PREVIEW,
            timestamp=utc_timestamp(),
            messages=[],
        )
        self._conversations.insert(0, conversation)
        return conversation

    def create(self) -> Conversation:
        """Create an empty conversation at the front of the list."""
        with self._lock:
            conversation = self._insert(self.new_id())
            self._persist()
        logger.info(f"Created conversation {conversation.id}")
        return conversation.model_copy(deep=True)

    def append_message(
        self,
        conversation_id: str,
        text: str,
        message_type: MessageType | str,
    ) -> Conversation:
        """
        Append a message, creating the conversation first if the id is unknown.

        User messages refresh the preview and, while the title is still the
        default, derive the title from the message text.
        """
        message = Message(text=text, type=MessageType(message_type), timestamp=utc_timestamp())
        with self._lock:
            conversation = self._find(conversation_id)
            if conversation is None:
                logger.info(f"Conversation {conversation_id} not found; creating it")
                conversation = self._insert(conversation_id)

            conversation.messages.append(message)
            if message.type is MessageType.USER:
                conversation.preview = derive_preview(text)
                if conversation.has_default_title:
                    title = derive_title(text)
                    if title is not None:
                        conversation.title = title
            self._persist()
            return conversation.model_copy(deep=True)

    def delete(self, conversation_id: str) -> None:
        """Remove a conversation; unknown ids are ignored."""
        with self._lock:
            remaining = [c for c in self._conversations if c.id != conversation_id]
            if len(remaining) == len(self._conversations):
                return
            self._conversations = remaining
            if self._active_id == conversation_id:
                self._active_id = None
            self._persist()
        logger.info(f"Deleted conversation {conversation_id}")

    def list(self) -> list[Conversation]:
        """All conversations, most recent first, as detached copies."""
        with self._lock:
            return [c.model_copy(deep=True) for c in self._conversations]

    def get(self, conversation_id: str) -> Conversation | None:
        with self._lock:
            conversation = self._find(conversation_id)
            return conversation.model_copy(deep=True) if conversation else None

    def _find(self, conversation_id: str) -> Conversation | None:
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    # ---- active conversation ----

    def set_active(self, conversation_id: str | None) -> None:
        self._active_id = conversation_id

    def get_active(self) -> str | None:
        return self._active_id
