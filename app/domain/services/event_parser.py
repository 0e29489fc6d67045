# app/domain/services/event_parser.py
"""
Messenger webhook payload → InboundEvent.

Body shape::

    {"object": "page",
     "entry": [{"id": ..., "time": ...,
                "messaging": [{"sender": {"id": "..."},
                               "recipient": {"id": "..."},
                               "timestamp": 1700000000000,
                               "message": {...} | "postback": {...}}]}]}

Quick-reply payload wins over the message text. Only the first attachment
of a message is used; stickers (the "like" button included) come through
as kind ``sticker``, never ``image``. Echoes, deliveries and reads carry no
user input and are ignored.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from app.domain.errors import MalformedEventError
from app.domain.models.conversation import (
    AttachmentInput,
    InboundEvent,
    QuickReplyInput,
    TextInput,
)

logger = logging.getLogger("event_parser")

_IGNORED_KEYS = ("delivery", "read", "reaction", "optin")


def is_ignorable(event: Mapping[str, Any]) -> bool:
    message = event.get("message")
    if isinstance(message, Mapping) and message.get("is_echo"):
        return True
    return "message" not in event and "postback" not in event and any(
        key in event for key in _IGNORED_KEYS
    )


def parse_messaging_event(event: Any) -> InboundEvent:
    """Parse one ``entry[].messaging[]`` item or raise MalformedEventError."""
    if not isinstance(event, Mapping):
        raise MalformedEventError("Messaging event is not an object")

    sender = event.get("sender")
    sender_id = sender.get("id") if isinstance(sender, Mapping) else None
    if not sender_id:
        raise MalformedEventError("Messaging event has no sender id")
    sender_id = str(sender_id)
    timestamp = event.get("timestamp")

    postback = event.get("postback")
    if isinstance(postback, Mapping):
        payload = postback.get("payload") or postback.get("title")
        if not payload:
            raise MalformedEventError(f"Postback from {sender_id} has no payload")
        return InboundEvent(sender_id, QuickReplyInput(str(payload)), timestamp)

    message = event.get("message")
    if not isinstance(message, Mapping):
        raise MalformedEventError(f"Event from {sender_id} has neither message nor postback")

    quick_reply = message.get("quick_reply")
    if isinstance(quick_reply, Mapping) and quick_reply.get("payload"):
        return InboundEvent(sender_id, QuickReplyInput(str(quick_reply["payload"])), timestamp)

    attachments = message.get("attachments")
    if isinstance(attachments, list) and attachments:
        first = attachments[0]
        if not isinstance(first, Mapping) or not first.get("type"):
            raise MalformedEventError(f"Attachment from {sender_id} has no type")
        payload = first.get("payload") if isinstance(first.get("payload"), Mapping) else {}
        kind = str(first["type"])
        # the "like" button and stickers arrive as image attachments
        if message.get("sticker_id") or payload.get("sticker_id"):
            kind = "sticker"
        return InboundEvent(sender_id, AttachmentInput(kind, dict(payload)), timestamp)

    text = message.get("text")
    if isinstance(text, str):
        return InboundEvent(sender_id, TextInput(text), timestamp)

    raise MalformedEventError(f"Message from {sender_id} has no text, quick reply or attachment")


def parse_webhook_batch(body: Mapping[str, Any]) -> tuple[list[InboundEvent], int]:
    """Parse every messaging event in a webhook body.

    Returns ``(events, skipped)`` where ``skipped`` counts malformed events.
    One bad event never stops the rest of the batch.
    """
    events: list[InboundEvent] = []
    skipped = 0

    entries = body.get("entry") or []
    if not isinstance(entries, list):
        logger.warning("Webhook body has non-list entry: %r", type(entries).__name__)
        return events, 1

    for entry in entries:
        messaging = entry.get("messaging") if isinstance(entry, Mapping) else None
        if not isinstance(messaging, list):
            skipped += 1
            logger.warning("Skipping webhook entry without messaging list")
            continue
        for raw in messaging:
            if isinstance(raw, Mapping) and is_ignorable(raw):
                continue
            try:
                events.append(parse_messaging_event(raw))
            except MalformedEventError as exc:
                skipped += 1
                logger.warning("Skipping malformed event: %s", exc)

    return events, skipped
