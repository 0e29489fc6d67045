# app/domain/services/report_sink.py
"""
Finalization: hand a completed intake to whoever consumes it.

The engine builds an :class:`IntakeReport` when a flow reaches ``complete``
and awaits ``sink.submit(report)``. A sink that raises keeps the session
alive so the user can retry.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

logger = logging.getLogger("report_sink")


def new_reference() -> str:
    """Short human-friendly reference, e.g. ``R-7F3A9C``."""
    return "R-" + secrets.token_hex(3).upper()


@dataclass(frozen=True)
class IntakeReport:
    reference: str
    flow: str
    sender_id: str
    collected: dict[str, Any] = field(default_factory=dict)
    started_at: float = 0.0
    completed_at: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ReportSink(Protocol):
    async def submit(self, report: IntakeReport) -> None: ...


class LoggingReportSink:
    """Default sink: log the report and keep nothing."""

    async def submit(self, report: IntakeReport) -> None:
        logger.info(
            "Intake %s completed (flow=%s sender=%s): %s",
            report.reference,
            report.flow,
            report.sender_id,
            report.collected,
        )
