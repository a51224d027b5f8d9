"""
Webhook Client

Async client for the remote endpoint that produces assistant replies.

Request body:
    {"action": "sendMessage", "sessionId": ..., "route": ..., "chatInput": ...}

Accepted reply shapes (first match wins):
    [{"output": "..."}, ...]  -> first element's output
    {"output": "..."}         -> output
    "..."                     -> the string itself
    anything else             -> a fixed placeholder
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

SEND_MESSAGE_ACTION = "sendMessage"
DEFAULT_ROUTE = "general"

EMPTY_LIST_REPLY = "I received your message but couldn't generate a proper response."
UNKNOWN_SHAPE_REPLY = "Thank you for your message. I'm processing your request."
APOLOGY_MESSAGE = (
    "Sorry, I'm having trouble connecting right now. Please try again in a moment."
)


class WebhookError(Exception):
    """Transport failure, non-2xx status, or undecodable reply body."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def extract_reply(payload: Any) -> str:
    """Pull the reply text out of a decoded webhook response."""
    if isinstance(payload, list):
        first = payload[0] if payload else None
        output = first.get("output") if isinstance(first, dict) else None
        return str(output) if output else EMPTY_LIST_REPLY
    if isinstance(payload, dict) and payload.get("output"):
        return str(payload["output"])
    if isinstance(payload, str):
        return payload
    return UNKNOWN_SHAPE_REPLY


class WebhookClient:
    """
    Send chat messages to the webhook, one request per call.

    No retries: a failed request raises WebhookError and the caller decides
    what to show instead.

    Usage:
        async with WebhookClient("https://example.com/webhook/chat") as client:
            reply = await client.send_message("conversation-1700000000000", "Hi")
    """

    def __init__(
        self,
        url: str,
        route: str = DEFAULT_ROUTE,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.route = route
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> WebhookClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def build_payload(self, session_id: str, text: str) -> dict[str, str]:
        return {
            "action": SEND_MESSAGE_ACTION,
            "sessionId": session_id,
            "route": self.route,
            "chatInput": text,
        }

    async def send_message(self, session_id: str, text: str) -> str:
        """
        Post one user message and return the assistant reply text.

        Raises:
            WebhookError: On transport errors, non-2xx responses, or a body
                that is not JSON.
        """
        payload = self.build_payload(session_id, text)
        logger.debug(
            f"Sending message to webhook for {session_id}",
            extra={"session_id": session_id, "route": self.route, "chars": len(text)},
        )
        try:
            response = await self.client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(f"Webhook returned HTTP {status_code}")
            raise WebhookError(f"HTTP error! status: {status_code}", status_code) from e
        except httpx.HTTPError as e:
            logger.warning(f"Webhook request failed: {e}")
            raise WebhookError(f"Webhook request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError both land here
            logger.warning("Webhook returned a non-JSON body")
            raise WebhookError(
                "Webhook returned a non-JSON body", response.status_code
            ) from e

        reply = extract_reply(data)
        logger.info(
            f"Received webhook reply for {session_id}",
            extra={"session_id": session_id, "status": response.status_code},
        )
        return reply
