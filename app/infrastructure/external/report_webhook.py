# app/infrastructure/external/report_webhook.py

import httpx
from loguru import logger

from app.domain.errors import FinalizationError
from app.domain.services.report_sink import IntakeReport


class HttpReportSink:
    """POST completed intake reports as JSON to a configured URL."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not url:
            raise RuntimeError("Report webhook URL is not set")
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def submit(self, report: IntakeReport) -> None:
        logger.info("Report HTTP → Posting {} to {}", report.reference, self._url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(self._url, json=report.to_dict())
        except httpx.HTTPError as exc:
            logger.error("Report HTTP transport error for {}: {}", report.reference, exc)
            raise FinalizationError(str(exc)) from exc

        if resp.status_code >= 400:
            logger.error("Report HTTP error {}: {}", resp.status_code, resp.text)
            raise FinalizationError(f"Report endpoint returned {resp.status_code}")

        logger.success("Report HTTP → {} accepted", report.reference)
