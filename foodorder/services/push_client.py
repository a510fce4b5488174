# foodorder/services/push_client.py
from typing import Any, List

import requests
from pydantic import BaseModel, Field

from foodorder.domain.errors import PushDeliveryError
from foodorder.domain.notifications import chunked
from foodorder.utils.retry import http_retry
from foodorder.utils.settings import PUSH_BATCH_SIZE, PUSH_ENDPOINT_URL, PUSH_TIMEOUT_SECONDS
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)


class PushReport(BaseModel):
    """Outcome of one fan-out; failed batches never stop the others."""

    messages: int = 0
    batches: int = 0
    sent_batches: int = 0
    failed_batches: int = 0
    errors: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed_batches == 0


class PushClient:
    def __init__(
        self,
        endpoint: str | None = None,
        timeout: int | None = None,
        batch_size: int | None = None,
        session: Any = None,
    ):
        self.endpoint = endpoint or PUSH_ENDPOINT_URL
        self.timeout = timeout or PUSH_TIMEOUT_SECONDS
        self.batch_size = batch_size or PUSH_BATCH_SIZE
        self.session = session or requests.Session()

    @http_retry()
    def _post(self, batch: List[dict]):
        return self.session.post(
            self.endpoint,
            json=batch,
            headers={
                "Accept": "application/json",
                "Accept-Encoding": "gzip, deflate",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )

    def send_batch(self, batch: List[dict]) -> dict:
        logger.info(f"PushClient POST {self.endpoint} ({len(batch)} messages)")
        resp = self._post(batch)
        if not 200 <= resp.status_code < 300:
            raise PushDeliveryError(
                f"Push send failed ({resp.status_code}): {resp.text}",
                status_code=resp.status_code,
            )
        try:
            body = resp.json()
        except ValueError:
            body = {}
        data = body.get("data") if isinstance(body, dict) else None
        errors = body.get("errors") if isinstance(body, dict) else None
        logger.info(f"Push response: {len(data or [])} tickets, errors={errors or []}")
        return body

    def send(self, messages: List[dict]) -> PushReport:
        report = PushReport(messages=len(messages))
        if not messages:
            return report

        for idx, batch in enumerate(chunked(messages, self.batch_size)):
            report.batches += 1
            try:
                self.send_batch(batch)
                report.sent_batches += 1
            except (PushDeliveryError, requests.RequestException) as e:
                report.failed_batches += 1
                report.errors.append(f"batch {idx}: {e}")
                logger.error(f"Push batch {idx} failed: {e}")

        return report
