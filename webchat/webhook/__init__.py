"""Client for the remote chat webhook."""

from .client import (
    APOLOGY_MESSAGE,
    EMPTY_LIST_REPLY,
    UNKNOWN_SHAPE_REPLY,
    WebhookClient,
    WebhookError,
    extract_reply,
)

__all__ = [
    "APOLOGY_MESSAGE",
    "EMPTY_LIST_REPLY",
    "UNKNOWN_SHAPE_REPLY",
    "WebhookClient",
    "WebhookError",
    "extract_reply",
]
