# app/domain/services/validators.py
"""
Input validators used by flow step tables.

Each factory returns a callable ``(UserInput) -> value`` that either returns
the value to store in ``collected`` or raises ``ValidationError``.

Matching is exact after ``strip().casefold()``; free text that merely
contains an option word does not match it.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping

from app.domain.errors import ValidationError
from app.domain.models.conversation import (
    AttachmentInput,
    QuickReplyInput,
    TextInput,
    UserInput,
)

Validator = Callable[[UserInput], Any]

SKIP_KEYWORDS = frozenset({"skip", "done"})

_PHONE_SEPARATORS = re.compile(r"[\s\-.()]")
_PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")


def normalize(text: str) -> str:
    return text.strip().casefold()


def is_skip(user_input: UserInput) -> bool:
    if isinstance(user_input, TextInput):
        return normalize(user_input.text) in SKIP_KEYWORDS
    if isinstance(user_input, QuickReplyInput):
        return normalize(user_input.payload) in SKIP_KEYWORDS
    return False


def _require_text(user_input: UserInput) -> str:
    if not isinstance(user_input, TextInput):
        raise ValidationError("Expected a text reply")
    return user_input.text.strip()


def free_text(min_length: int = 2) -> Validator:
    """Free text of at least ``min_length`` characters after stripping."""

    def validate(user_input: UserInput) -> str:
        text = _require_text(user_input)
        if len(text) < min_length:
            raise ValidationError(f"Text shorter than {min_length} characters")
        return text

    return validate


def positive_int() -> Validator:
    def validate(user_input: UserInput) -> int:
        text = _require_text(user_input)
        if not text.isascii():
            raise ValidationError(f"Not a whole number: {text!r}")
        try:
            value = int(text)
        except ValueError:
            raise ValidationError(f"Not a whole number: {text!r}") from None
        if value <= 0:
            raise ValidationError(f"Count must be positive, got {value}")
        return value

    return validate


def choice(options: Mapping[str, str], payload_prefix: str) -> Validator:
    """Enumerated choice.

    ``options`` maps canonical value → display label, e.g.
    ``{"CRITICAL": "Critical"}``. Accepted forms: the quick-reply payload
    ``f"{payload_prefix}_{VALUE}"``, or the value or label typed as text.
    """
    by_payload = {f"{payload_prefix}_{value}": value for value in options}
    by_text: dict[str, str] = {}
    for value, label in options.items():
        by_text[normalize(value)] = value
        by_text[normalize(label)] = value

    def validate(user_input: UserInput) -> str:
        if isinstance(user_input, QuickReplyInput):
            value = by_payload.get(user_input.payload.strip())
            if value is None:
                value = by_text.get(normalize(user_input.payload))
        elif isinstance(user_input, TextInput):
            value = by_text.get(normalize(user_input.text))
        else:
            value = None
        if value is None:
            raise ValidationError("Not one of the listed options")
        return value

    return validate


YES_NO = {"YES": "Yes", "NO": "No"}


def yes_no(payload_prefix: str) -> Validator:
    base = choice(YES_NO, payload_prefix)
    short = {"y": "YES", "n": "NO"}

    def validate(user_input: UserInput) -> str:
        if isinstance(user_input, TextInput) and normalize(user_input.text) in short:
            return short[normalize(user_input.text)]
        return base(user_input)

    return validate


def phone_number() -> Validator:
    """Optional leading ``+`` followed by 7-15 ASCII digits; separators ignored."""

    def validate(user_input: UserInput) -> str:
        if isinstance(user_input, QuickReplyInput):
            # Messenger's user_phone_number quick reply puts the number in the payload
            raw = user_input.payload
        else:
            raw = _require_text(user_input)
        number = _PHONE_SEPARATORS.sub("", raw.strip())
        if not _PHONE_PATTERN.match(number):
            raise ValidationError(f"Not a phone number: {raw!r}")
        return number

    return validate


def location(min_length: int = 3) -> Validator:
    """A shared location pin, or a typed address/landmark."""
    text_validator = free_text(min_length)

    def validate(user_input: UserInput) -> str:
        if isinstance(user_input, AttachmentInput):
            if user_input.kind != "location":
                raise ValidationError(f"Expected a location, got {user_input.kind}")
            coords = user_input.payload.get("coordinates") or {}
            lat, lng = coords.get("lat"), coords.get("long")
            if lat is None or lng is None:
                raise ValidationError("Location attachment without coordinates")
            return f"{lat},{lng}"
        return text_validator(user_input)

    return validate


def image() -> Validator:
    def validate(user_input: UserInput) -> str:
        if not isinstance(user_input, AttachmentInput) or user_input.kind != "image":
            raise ValidationError("Expected a photo")
        if user_input.payload.get("sticker_id"):
            raise ValidationError("Stickers are not photos")
        url = user_input.payload.get("url")
        if not url:
            raise ValidationError("Image attachment without URL")
        return url

    return validate
