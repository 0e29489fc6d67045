# app/domain/flows/common.py
"""Prompt builders shared by the flow tables."""

from __future__ import annotations

from typing import Mapping

from app.domain.models.conversation import OutboundMessage, QuickReply

SKIP_HINT = "\n\nType SKIP to leave this out."


def text_prompt(text: str) -> OutboundMessage:
    return OutboundMessage(text=text)


def options_prompt(text: str, options: Mapping[str, str], payload_prefix: str) -> OutboundMessage:
    """Prompt with one quick reply per option (payload ``PREFIX_VALUE``)."""
    return OutboundMessage(
        text=text,
        quick_replies=tuple(
            QuickReply(title=label, payload=f"{payload_prefix}_{value}")
            for value, label in options.items()
        ),
    )


def option_list(options: Mapping[str, str]) -> str:
    return ", ".join(options.values())


def phone_prompt(text: str) -> OutboundMessage:
    """Prompt offering Messenger's native phone-number quick reply."""
    return OutboundMessage(
        text=text,
        quick_replies=(QuickReply(title="", content_type="user_phone_number"),),
    )


def skip_prompt(text: str) -> OutboundMessage:
    return OutboundMessage(
        text=text + SKIP_HINT,
        quick_replies=(QuickReply(title="Skip", payload="SKIP"),),
    )
