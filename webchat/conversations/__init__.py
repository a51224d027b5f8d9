"""Conversation persistence for the chat sidebar."""

from .models import DEFAULT_PREVIEW, DEFAULT_TITLE, Conversation, Message, MessageType
from .store import ConversationStore, derive_preview, derive_title

__all__ = [
    "Conversation",
    "ConversationStore",
    "DEFAULT_PREVIEW",
    "DEFAULT_TITLE",
    "Message",
    "MessageType",
    "derive_preview",
    "derive_title",
]
