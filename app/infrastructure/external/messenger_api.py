# app/infrastructure/external/messenger_api.py

from dataclasses import dataclass
from typing import Any, Optional

import httpx
from loguru import logger

from app.domain.models.conversation import OutboundMessage

GRAPH_API_BASE = "https://graph.facebook.com"
GRAPH_API_VERSION = "v21.0"


@dataclass(frozen=True)
class SendResult:
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


def build_message_payload(recipient_id: str, message: OutboundMessage) -> dict[str, Any]:
    """Send API request body for one outbound message."""
    body: dict[str, Any] = {}
    if message.attachment is not None:
        body["attachment"] = {
            "type": message.attachment.kind,
            "payload": {"url": message.attachment.url, "is_reusable": True},
        }
    else:
        body["text"] = message.text

    if message.quick_replies:
        quick_replies = []
        for qr in message.quick_replies:
            if qr.content_type == "text":
                quick_replies.append({"content_type": "text", "title": qr.title[:20], "payload": qr.payload})
            else:
                quick_replies.append({"content_type": qr.content_type})
        body["quick_replies"] = quick_replies[:13]

    return {
        "recipient": {"id": recipient_id},
        "message": body,
        "messaging_type": "RESPONSE",
    }


class MessengerClient:
    """
    Low-level Messenger Send API client.

    ``send_message`` never raises for HTTP or transport errors; it returns
    a SendResult so callers can decide what a failed delivery means.
    No retries: one attempt per message.
    """

    def __init__(
        self,
        access_token: str,
        *,
        api_base: str = GRAPH_API_BASE,
        api_version: str = GRAPH_API_VERSION,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._access_token = access_token
        self._url = f"{api_base.rstrip('/')}/{api_version}/me/messages"
        self._timeout = timeout
        self._transport = transport

    async def send_message(self, recipient_id: str, message: OutboundMessage) -> SendResult:
        if not self._access_token:
            logger.error("PAGE_ACCESS_TOKEN not set; cannot send message to {}", recipient_id)
            return SendResult(ok=False, error="access token not configured")

        payload = build_message_payload(recipient_id, message)
        logger.info("Messenger HTTP → Sending message to {}: {!r}", recipient_id, message.text)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    self._url,
                    params={"access_token": self._access_token},
                    json=payload,
                )
        except httpx.HTTPError as exc:
            logger.error("Messenger HTTP transport error for {}: {}", recipient_id, exc)
            return SendResult(ok=False, error=str(exc) or type(exc).__name__)

        if resp.status_code >= 400:
            logger.error(
                "Messenger HTTP error {}: {}",
                resp.status_code,
                resp.text,
            )
            return SendResult(ok=False, status_code=resp.status_code, error=resp.text)

        logger.success("Messenger HTTP → Message sent successfully to {}", recipient_id)
        return SendResult(ok=True, status_code=resp.status_code)
