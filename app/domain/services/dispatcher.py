# app/domain/services/dispatcher.py
"""
Glue between parsed webhook events, the conversation engine and the
outbound Send capability.

Events from different senders run concurrently; events from the same sender
run in arrival order. Each event is isolated: an exception while handling
one is logged and never affects its siblings in the batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Protocol

from app.domain.errors import SendFailure
from app.domain.i18n import t
from app.domain.models.conversation import InboundEvent, OutboundMessage
from app.domain.services.conversation_engine import ConversationEngine

logger = logging.getLogger("dispatcher")


class MessageSender(Protocol):
    async def send_message(self, recipient_id: str, message: OutboundMessage) -> Any: ...


class MessageDispatcher:
    def __init__(self, engine: ConversationEngine, sender: MessageSender, send_timeout: float = 10.0):
        self.engine = engine
        self.sender = sender
        self._send_timeout = send_timeout

    async def dispatch(self, events: Iterable[InboundEvent]) -> None:
        by_sender: dict[str, list[InboundEvent]] = {}
        for event in events:
            by_sender.setdefault(event.sender_id, []).append(event)
        await asyncio.gather(*(self._dispatch_sender(evts) for evts in by_sender.values()))

    async def _dispatch_sender(self, events: list[InboundEvent]) -> None:
        for event in events:
            await self.dispatch_event(event)

    async def dispatch_event(self, event: InboundEvent) -> bool:
        """Handle one event end to end. Returns True if every reply was delivered."""
        try:
            messages = await self.engine.handle_input(event.sender_id, event.input)
        except Exception:
            logger.exception("Failed to handle event from %s", event.sender_id)
            return False
        return await self.deliver(event.sender_id, messages)

    async def deliver(self, recipient_id: str, messages: list[OutboundMessage]) -> bool:
        """Send messages in order; stop at the first failure.

        A failure gets one best-effort apology. Session state is never rolled
        back because of a failed send.
        """
        for message in messages:
            try:
                await self._send(recipient_id, message)
            except SendFailure as exc:
                logger.warning("Send to %s failed: %s", recipient_id, exc)
                try:
                    await self._send(recipient_id, OutboundMessage(text=t("SEND_APOLOGY")))
                except SendFailure as apology_exc:
                    logger.warning("Apology to %s also failed: %s", recipient_id, apology_exc)
                return False
        return True

    async def _send(self, recipient_id: str, message: OutboundMessage) -> None:
        try:
            result = await asyncio.wait_for(
                self.sender.send_message(recipient_id, message),
                timeout=self._send_timeout,
            )
        except asyncio.TimeoutError:
            raise SendFailure(f"timed out after {self._send_timeout}s") from None
        except Exception as exc:
            raise SendFailure(f"{type(exc).__name__}: {exc}") from exc

        if not getattr(result, "ok", False):
            raise SendFailure(getattr(result, "error", None) or "delivery rejected")
