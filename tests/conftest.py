"""Shared test fixtures for the Relief Bot test suite."""

import asyncio

import pytest

from app.domain.flows import emergency
from app.domain.models.conversation import OutboundMessage
from app.domain.services.conversation_engine import ConversationEngine
from app.domain.services.session_store import SessionStore
from app.infrastructure.external.messenger_api import SendResult

SENDER = "24680135790"


class FakeClock:
    """Manually advanced replacement for time.time()."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSender:
    """Records outbound messages; fails for recipients listed in ``failing``."""

    def __init__(self, failing=()):
        self.sent: list[tuple[str, OutboundMessage]] = []
        self.failing = set(failing)

    async def send_message(self, recipient_id: str, message: OutboundMessage) -> SendResult:
        self.sent.append((recipient_id, message))
        if recipient_id in self.failing:
            return SendResult(ok=False, status_code=500, error="boom")
        return SendResult(ok=True, status_code=200)

    def texts(self, recipient_id: str = SENDER) -> list[str]:
        return [m.text for r, m in self.sent if r == recipient_id]


class RecordingSink:
    def __init__(self, fail: bool = False):
        self.reports = []
        self.fail = fail

    async def submit(self, report) -> None:
        if self.fail:
            raise RuntimeError("report endpoint down")
        self.reports.append(report)


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> SessionStore:
    flow = emergency.FLOW
    return SessionStore(flow.entry_step, flow.step_names, clock=clock)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def engine(store, sink, clock) -> ConversationEngine:
    return ConversationEngine(emergency.FLOW, store, sink, clock=clock)
