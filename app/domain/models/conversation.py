# app/domain/models/conversation.py
"""
Value objects for the conversation core.

Inputs are a small tagged variant (text, quick-reply payload, attachment),
outbound messages are immutable, and a Session is the per-sender record
owned by the SessionStore.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Optional, Union

COMPLETE = "complete"


# ──────────────────────────────────────────────────────────
# Inbound
# ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TextInput:
    text: str


@dataclass(frozen=True)
class QuickReplyInput:
    """A quick-reply selection or postback button payload."""
    payload: str


@dataclass(frozen=True)
class AttachmentInput:
    kind: str  # "image", "location", "audio", "video", "file", ...
    payload: dict[str, Any] = field(default_factory=dict)


UserInput = Union[TextInput, QuickReplyInput, AttachmentInput]


def input_text(user_input: UserInput) -> Optional[str]:
    """Return the comparable text form of an input (None for attachments)."""
    if isinstance(user_input, TextInput):
        return user_input.text
    if isinstance(user_input, QuickReplyInput):
        return user_input.payload
    return None


@dataclass(frozen=True)
class InboundEvent:
    """One messaging event attributed to a sender."""
    sender_id: str
    input: UserInput
    timestamp: Optional[int] = None


# ──────────────────────────────────────────────────────────
# Outbound
# ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class QuickReply:
    title: str
    payload: str = ""
    content_type: str = "text"  # "text" or "user_phone_number"


@dataclass(frozen=True)
class OutboundAttachment:
    """Media by URL. Part of the Send client's message contract; the current
    flows only send text and quick replies."""
    kind: str
    url: str


@dataclass(frozen=True)
class OutboundMessage:
    text: str
    quick_replies: tuple[QuickReply, ...] = ()
    attachment: Optional[OutboundAttachment] = None


# ──────────────────────────────────────────────────────────
# Session
# ──────────────────────────────────────────────────────────

@dataclass
class Session:
    sender_id: str
    current_step: str
    collected: dict[str, Any] = field(default_factory=dict)
    created_at: float = 0.0
    last_activity_at: float = 0.0

    def snapshot(self) -> "Session":
        """Detached copy safe to hand out of the store."""
        return Session(
            sender_id=self.sender_id,
            current_step=self.current_step,
            collected=copy.deepcopy(self.collected),
            created_at=self.created_at,
            last_activity_at=self.last_activity_at,
        )
