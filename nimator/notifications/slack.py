from __future__ import annotations

import logging

import httpx

from ..config import settings
from ..engine.models import NimatorResult, NotificationLevel
from .base import Notifier

logger = logging.getLogger(__name__)

_EMOJI = {
    NotificationLevel.OKAY: ":white_check_mark:",
    NotificationLevel.WARNING: ":warning:",
    NotificationLevel.ERROR: ":red_circle:",
    NotificationLevel.CRITICAL: ":rotating_light:",
}


class SlackNotifier(Notifier):
    """POSTs the report to a Slack incoming webhook."""

    kind = "slack"

    def __init__(
        self,
        webhook_url: str = "",
        threshold: NotificationLevel | str = NotificationLevel.ERROR,
        timeout: float | None = None,
    ) -> None:
        super().__init__(threshold)
        self.webhook_url = webhook_url or settings.slack_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds

    @property
    def is_enabled(self) -> bool:
        return bool(self.webhook_url)

    def format_message(self, result: NimatorResult) -> str:
        body = result.render_plain_text(self.threshold)
        return f"{_EMOJI[result.level]} *Nimator: {result.level.label}*\n```{body}```"

    def _deliver(self, result: NimatorResult) -> bool:
        if not self.is_enabled:
            logger.debug("Slack: skipping send (no webhook_url)")
            return False
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(self.webhook_url, json={"text": self.format_message(result), "mrkdwn": True})
        except httpx.HTTPError as exc:
            logger.warning("Slack notification failed: %s", exc)
            return False
        if resp.status_code != 200:
            logger.warning("Slack webhook returned %d: %s", resp.status_code, resp.text[:200])
            return False
        return True
