# app/domain/errors.py
"""Exception types shared by the conversation core and its collaborators."""

from __future__ import annotations


class BotError(Exception):
    """Base class for all relief bot errors."""


class ValidationError(BotError):
    """User input does not satisfy the current step's rule.

    Always recovered inside the engine by re-prompting.
    """


class UnknownSenderError(BotError):
    """An operation referenced a sender that has no session."""

    def __init__(self, sender_id: str):
        super().__init__(f"No session for sender {sender_id}")
        self.sender_id = sender_id


class SendFailure(BotError):
    """Outbound message delivery failed."""


class MalformedEventError(BotError):
    """Inbound webhook event is missing required fields."""


class FlowDefinitionError(BotError):
    """A flow's step table is not a valid conversation graph."""


class FinalizationError(BotError):
    """The completed report could not be handed off."""
