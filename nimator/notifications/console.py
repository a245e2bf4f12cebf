from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..engine.models import NimatorResult, NotificationLevel
from .base import Notifier

_STYLE = {
    NotificationLevel.OKAY: "bold green",
    NotificationLevel.WARNING: "bold yellow",
    NotificationLevel.ERROR: "bold red",
    NotificationLevel.CRITICAL: "bold white on red",
}


class ConsoleNotifier(Notifier):
    """Prints the rendered report to the terminal."""

    kind = "console"

    def __init__(
        self,
        threshold: NotificationLevel | str = NotificationLevel.OKAY,
        console: Console | None = None,
    ) -> None:
        super().__init__(threshold)
        self.console = console or Console()

    def _deliver(self, result: NimatorResult) -> bool:
        text = result.render_plain_text(self.threshold)
        self.console.print(
            Panel(Text(text), title=f"Nimator — {result.level.label}", style=_STYLE[result.level]),
        )
        return True
