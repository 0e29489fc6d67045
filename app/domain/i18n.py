# app/domain/i18n.py
"""Flow-independent bot messages.

Step prompts live in the flow tables under ``app/domain/flows``; these are
the messages the engine sends regardless of which flow is active.
"""

MESSAGES = {
    "WELCOME": (
        "👋 Hi! I can help you send us your {title}.\n\n"
        "Type HELP or START to begin.\n"
        "Type CANCEL at any time to stop."
    ),
    "CANCELLED": "🛑 Cancelled. Nothing was submitted.\n\nType HELP to start again.",
    "COMPLETED": "✅ Thank you! Your {title} has been submitted.\n\nReference: {reference}\n{summary}",
    "FINALIZE_FAILED": "⚠️ We could not submit your {title} just now. Please send your last answer again.",
    "UNEXPECTED_ATTACHMENT": "I can't use a {kind} here. I'm waiting for {expected}.",
    "IMAGE_RECEIVED": "📷 Thanks, we received your photo.",
    "SEND_APOLOGY": "Sorry, something went wrong on our side. Please reply again.",
}


def t(key: str, **kwargs) -> str:
    text = MESSAGES[key]
    return text.format(**kwargs) if kwargs else text
