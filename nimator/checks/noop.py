from __future__ import annotations

from ..engine.models import CheckResult, NotificationLevel


class NoopCheck:
    """Always reports the same result. Handy as a placeholder or heartbeat."""

    def __init__(
        self,
        name: str = "noop",
        level: NotificationLevel | str = NotificationLevel.OKAY,
        message: str = "",
    ) -> None:
        self.name = name
        self.level = NotificationLevel.parse(level)
        self.message = message

    def run(self) -> CheckResult:
        return CheckResult(self.name, self.level, self.message or None)
