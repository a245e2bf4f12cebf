from __future__ import annotations

import logging
from collections.abc import Iterable

from ..engine.models import NimatorResult, NotificationLevel

logger = logging.getLogger(__name__)


class Notifier:
    """Base class: threshold filtering around a ``_deliver`` hook."""

    kind = "notifier"

    def __init__(self, threshold: NotificationLevel | str = NotificationLevel.ERROR) -> None:
        self.threshold = NotificationLevel.parse(threshold)

    def should_notify(self, result: NimatorResult) -> bool:
        return result.level >= self.threshold

    def notify(self, result: NimatorResult) -> bool:
        if not self.should_notify(result):
            logger.debug("%s: %s below threshold %s, not sent", self.kind, result.level, self.threshold)
            return False
        return self._deliver(result)

    def _deliver(self, result: NimatorResult) -> bool:
        raise NotImplementedError


def notify_all(notifiers: Iterable[Notifier], result: NimatorResult) -> dict[str, bool]:
    """Hand ``result`` to every notifier; returns delivery status per notifier kind."""
    delivered: dict[str, bool] = {}
    for notifier in notifiers:
        try:
            sent = notifier.notify(result)
        except Exception:
            logger.exception("%s notifier crashed", notifier.kind)
            sent = False
        delivered[notifier.kind] = delivered.get(notifier.kind, False) or sent
    return delivered
