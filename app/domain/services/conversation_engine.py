# app/domain/services/conversation_engine.py
"""
Conversation engine: a small interpreter over a Flow's step table.

For each inbound input, in order:

1. cancel keywords delete the session (from any step);
2. start keywords create a session when there is none;
3. without a session, anything else gets the welcome prompt;
4. otherwise the current step validates the input, writes its field,
   and moves to the next step; reaching ``complete`` runs finalization
   and deletes the session.

All work for one sender runs under ``SessionStore.lock(sender_id)``.
The engine only returns outbound messages; delivering them is the
dispatcher's job, so a failed send never rolls back a transition.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from typing import Any, Callable, Mapping, Optional

from app.domain.errors import UnknownSenderError, ValidationError
from app.domain.i18n import t
from app.domain.models.conversation import (
    COMPLETE,
    AttachmentInput,
    OutboundMessage,
    Session,
    UserInput,
    input_text,
)
from app.domain.models.flow import Flow, StepDefinition
from app.domain.services.report_sink import (
    IntakeReport,
    LoggingReportSink,
    ReportSink,
    new_reference,
)
from app.domain.services.session_store import SessionStore
from app.domain.services.validators import is_skip, normalize

logger = logging.getLogger("conversation_engine")

CANCEL_KEYWORDS = frozenset({"cancel", "stop", "reset", "quit"})
START_KEYWORDS = frozenset({"help", "start", "hi", "hello", "get_started"})


class _Blank(dict):
    def __missing__(self, key):
        return "-"


def render(message: OutboundMessage, collected: Mapping[str, Any]) -> OutboundMessage:
    """Fill ``{field}`` placeholders in a prompt from collected data."""
    if "{" not in message.text:
        return message
    return dataclasses.replace(message, text=message.text.format_map(_Blank(collected)))


class ConversationEngine:
    def __init__(
        self,
        flow: Flow,
        store: SessionStore,
        sink: Optional[ReportSink] = None,
        *,
        finalize_timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ):
        self.flow = flow
        self.store = store
        self._sink = sink or LoggingReportSink()
        self._finalize_timeout = finalize_timeout
        self._clock = clock

    async def handle_input(self, sender_id: str, user_input: UserInput) -> list[OutboundMessage]:
        async with self.store.lock(sender_id):
            try:
                return await self._handle(sender_id, user_input)
            except UnknownSenderError:
                logger.warning("Session for %s vanished mid-transition", sender_id)
                return [self._welcome()]

    # ── dispatch ────────────────────────────────────────────

    async def _handle(self, sender_id: str, user_input: UserInput) -> list[OutboundMessage]:
        text = input_text(user_input)
        keyword = normalize(text) if text is not None else None

        if keyword in CANCEL_KEYWORDS:
            self.store.delete(sender_id)
            logger.info("Sender %s cancelled", sender_id)
            return [OutboundMessage(text=t("CANCELLED"))]

        session = self.store.get(sender_id)

        if session is None:
            if keyword in START_KEYWORDS:
                session = self.store.reset(sender_id)
                return [self._prompt_for(session.current_step, session.collected)]
            return [self._welcome()]

        step = self.flow.step(session.current_step)

        if isinstance(user_input, AttachmentInput) and user_input.kind not in step.accepts:
            return self._unexpected_attachment(session, step, user_input)

        if step.optional and is_skip(user_input):
            logger.info("Sender %s skipped %s", sender_id, step.name)
            return await self._advance(session, step, step.next_step, None)

        try:
            value = step.validate(user_input)
        except ValidationError as exc:
            logger.info("Sender %s failed %s: %s", sender_id, step.name, exc)
            self.store.touch(sender_id)
            return [render(step.failure_prompt, session.collected)]

        return await self._advance(session, step, step.select_next(value), value)

    def _unexpected_attachment(
        self, session: Session, step: StepDefinition, attachment: AttachmentInput
    ) -> list[OutboundMessage]:
        if attachment.kind == "image":
            # Photo sent outside the photo step: acknowledge, leave state alone
            return [OutboundMessage(text=t("IMAGE_RECEIVED"))]

        self.store.touch(session.sender_id)
        return [
            OutboundMessage(text=t("UNEXPECTED_ATTACHMENT", kind=attachment.kind, expected=step.expects)),
            render(step.prompt, session.collected),
        ]

    # ── transitions ─────────────────────────────────────────

    async def _advance(
        self,
        session: Session,
        step: StepDefinition,
        next_step: str,
        value: Any,
    ) -> list[OutboundMessage]:
        fields: dict[str, Any] = {}
        append: dict[str, Any] = {}
        if value is not None and step.field:
            (append if step.append else fields)[step.field] = value

        if next_step == COMPLETE:
            collected = dict(session.collected)
            collected.update(fields)
            for key, item in append.items():
                collected[key] = [*collected.get(key, []), item]
            return await self._finalize(session, collected)

        updated = self.store.update(session.sender_id, step=next_step, fields=fields, append=append)
        if updated is None:
            raise UnknownSenderError(session.sender_id)
        logger.info("Sender %s: %s → %s", session.sender_id, step.name, next_step)
        return [self._prompt_for(next_step, updated.collected)]

    async def _finalize(self, session: Session, collected: dict[str, Any]) -> list[OutboundMessage]:
        report = IntakeReport(
            reference=new_reference(),
            flow=self.flow.name,
            sender_id=session.sender_id,
            collected=collected,
            started_at=session.created_at,
            completed_at=self._clock(),
        )
        try:
            await asyncio.wait_for(self._sink.submit(report), timeout=self._finalize_timeout)
        except Exception:
            # Keep the session where it is; the user's next answer retries
            logger.exception("Finalization failed for %s (%s)", session.sender_id, report.reference)
            self.store.touch(session.sender_id)
            return [OutboundMessage(text=t("FINALIZE_FAILED", title=self.flow.title))]

        self.store.delete(session.sender_id)
        summary = self.flow.summary(collected) if self.flow.summary else ""
        return [
            OutboundMessage(
                text=t("COMPLETED", title=self.flow.title, reference=report.reference, summary=summary).rstrip()
            )
        ]

    # ── prompts ─────────────────────────────────────────────

    def _prompt_for(self, step_name: str, collected: Mapping[str, Any]) -> OutboundMessage:
        return render(self.flow.step(step_name).prompt, collected)

    def _welcome(self) -> OutboundMessage:
        return OutboundMessage(text=t("WELCOME", title=self.flow.title))
