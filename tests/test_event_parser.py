# tests/test_event_parser.py
"""Tests for Messenger webhook payload parsing."""

import pytest

from app.domain.errors import MalformedEventError
from app.domain.models.conversation import AttachmentInput, QuickReplyInput, TextInput
from app.domain.services.event_parser import parse_messaging_event, parse_webhook_batch


def _event(sender="111", **kw):
    return {"sender": {"id": sender}, "recipient": {"id": "PAGE"}, "timestamp": 1700000000000, **kw}


def test_text_message():
    event = parse_messaging_event(_event(message={"mid": "m1", "text": "help"}))
    assert event.sender_id == "111"
    assert event.input == TextInput("help")
    assert event.timestamp == 1700000000000


def test_quick_reply_payload_wins_over_text():
    event = parse_messaging_event(
        _event(message={"text": "Critical", "quick_reply": {"payload": "URGENCY_CRITICAL"}})
    )
    assert event.input == QuickReplyInput("URGENCY_CRITICAL")


def test_postback_becomes_quick_reply():
    event = parse_messaging_event(_event(postback={"title": "Get Started", "payload": "GET_STARTED"}))
    assert event.input == QuickReplyInput("GET_STARTED")


def test_first_attachment_only():
    event = parse_messaging_event(
        _event(
            message={
                "attachments": [
                    {"type": "image", "payload": {"url": "https://cdn/1.jpg"}},
                    {"type": "image", "payload": {"url": "https://cdn/2.jpg"}},
                ]
            }
        )
    )
    assert event.input == AttachmentInput("image", {"url": "https://cdn/1.jpg"})


def test_location_attachment():
    event = parse_messaging_event(
        _event(message={"attachments": [{"type": "location", "payload": {"coordinates": {"lat": 1.5, "long": 2.5}}}]})
    )
    assert event.input.kind == "location"
    assert event.input.payload["coordinates"] == {"lat": 1.5, "long": 2.5}


def test_like_sticker_is_not_an_image():
    event = parse_messaging_event(
        _event(
            message={
                "sticker_id": 369239263222822,
                "attachments": [
                    {
                        "type": "image",
                        "payload": {"url": "https://cdn/like.png", "sticker_id": 369239263222822},
                    }
                ],
            }
        )
    )
    assert event.input.kind == "sticker"


def test_numeric_sender_id_is_stringified():
    event = parse_messaging_event({"sender": {"id": 42}, "message": {"text": "hi"}})
    assert event.sender_id == "42"


@pytest.mark.parametrize(
    "raw",
    [
        {"message": {"text": "hi"}},
        {"sender": {}, "message": {"text": "hi"}},
        {"sender": "111", "message": {"text": "hi"}},
        _event(),
        _event(message={"mid": "m1"}),
        _event(postback={}),
        _event(message={"attachments": [{"payload": {}}]}),
        "not an object",
    ],
)
def test_malformed_events_raise(raw):
    with pytest.raises(MalformedEventError):
        parse_messaging_event(raw)


def test_batch_skips_bad_events_and_keeps_the_rest():
    body = {
        "object": "page",
        "entry": [
            {"messaging": [_event("a", message={"text": "help"}), {"message": {"text": "no sender"}}]},
            {"messaging": [_event("b", message={"text": "hi"})]},
            {"id": "no messaging list"},
        ],
    }
    events, skipped = parse_webhook_batch(body)
    assert [e.sender_id for e in events] == ["a", "b"]
    assert skipped == 2


def test_batch_ignores_echoes_and_receipts():
    body = {
        "object": "page",
        "entry": [
            {
                "messaging": [
                    _event(message={"is_echo": True, "text": "bot reply"}),
                    _event(delivery={"mids": ["m1"], "watermark": 1}),
                    _event(read={"watermark": 1}),
                    _event(message={"text": "real"}),
                ]
            }
        ],
    }
    events, skipped = parse_webhook_batch(body)
    assert [e.input for e in events] == [TextInput("real")]
    assert skipped == 0


def test_batch_with_no_entries():
    assert parse_webhook_batch({"object": "page"}) == ([], 0)
