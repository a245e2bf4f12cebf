"""OpsGenie notifier — opens an alert for runs at or above the threshold.

Uses the Alert API directly via httpx (``POST /v2/alerts``).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import settings
from ..engine.models import NimatorResult, NotificationLevel
from .base import Notifier

logger = logging.getLogger(__name__)

PRIORITIES = {
    NotificationLevel.CRITICAL: "P1",
    NotificationLevel.ERROR: "P2",
    NotificationLevel.WARNING: "P3",
    NotificationLevel.OKAY: "P5",
}

# OpsGenie caps: message 130 chars, description 15000 chars
_MAX_MESSAGE = 130
_MAX_DESCRIPTION = 15_000


class OpsGenieNotifier(Notifier):
    """Creates an OpsGenie alert with the rendered report as description."""

    kind = "opsgenie"

    def __init__(
        self,
        api_key: str = "",
        threshold: NotificationLevel | str = NotificationLevel.ERROR,
        team: str | None = None,
        api_url: str = "",
        timeout: float | None = None,
    ) -> None:
        super().__init__(threshold)
        self.api_key = api_key or settings.opsgenie_api_key
        self.team = team
        self.api_url = api_url or settings.opsgenie_api_url
        self.timeout = timeout or settings.http_timeout_seconds

    @property
    def is_enabled(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, result: NimatorResult) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": f"Nimator: {result.message}"[:_MAX_MESSAGE],
            "description": result.render_plain_text(self.threshold)[:_MAX_DESCRIPTION],
            "priority": PRIORITIES[result.level],
            "source": "nimator",
            "tags": ["nimator", result.level.label.lower()],
        }
        if self.team:
            payload["responders"] = [{"name": self.team, "type": "team"}]
        return payload

    def _deliver(self, result: NimatorResult) -> bool:
        if not self.is_enabled:
            logger.debug("OpsGenie: skipping send (no api_key)")
            return False
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(
                    self.api_url,
                    json=self.build_payload(result),
                    headers={"Authorization": f"GenieKey {self.api_key}"},
                )
        except httpx.HTTPError as exc:
            logger.warning("OpsGenie notification failed: %s", exc)
            return False
        if resp.status_code not in (200, 201, 202):
            logger.warning("OpsGenie API returned %d: %s", resp.status_code, resp.text[:200])
            return False
        return True
