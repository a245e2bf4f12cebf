"""Result model — severity levels and the immutable result tree.

A run produces one NimatorResult holding a LayerResult per executed layer,
each holding the CheckResults of that layer's checks.
"""

from __future__ import annotations

import functools
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

# ── Levels ───────────────────────────────────────────────────────────────────


@functools.total_ordering
class NotificationLevel(Enum):
    """Ordered severity: Okay < Warning < Error < Critical."""

    OKAY = 0
    WARNING = 1
    ERROR = 2
    CRITICAL = 3

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, NotificationLevel):
            return NotImplemented
        return self.value < other.value

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: str | NotificationLevel) -> NotificationLevel:
        """Accept a level or its case-insensitive name ("error", "Error")."""
        if isinstance(value, NotificationLevel):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            names = ", ".join(level.label for level in cls)
            raise ValueError(f"Unknown notification level {value!r} (expected one of: {names})") from None

    def __str__(self) -> str:
        return self.label


def max_level(levels: Iterable[NotificationLevel]) -> NotificationLevel:
    """Highest level in ``levels``, Okay when there are none."""
    return max(levels, default=NotificationLevel.OKAY)


# ── Result tree ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single check."""

    name: str
    level: NotificationLevel
    message: str | None = None

    def render_plain_text(self) -> str:
        return f"Check '{self.name}': {self.level.label} - {self.message or ''}"


@dataclass(frozen=True)
class LayerResult:
    """Outcome of one layer run; its level is the worst of its checks."""

    name: str
    check_results: tuple[CheckResult, ...] = ()

    def __post_init__(self) -> None:
        # Accept any sequence but store a tuple so the result stays immutable
        object.__setattr__(self, "check_results", tuple(self.check_results))

    @property
    def level(self) -> NotificationLevel:
        return max_level(r.level for r in self.check_results)

    def render_plain_text(self, threshold: NotificationLevel) -> str:
        lines = [f"Layer '{self.name}': {self.level.label}"]
        for check_result in self.check_results:
            if check_result.level >= threshold:
                lines.append("    " + check_result.render_plain_text())
        return "\n".join(lines)


class ResultKind(str, Enum):
    NORMAL = "normal"
    CRITICAL = "critical"


CRITICAL_SUMMARY = "Nimator (or one of its layers) itself failed."


@dataclass(frozen=True)
class NimatorResult:
    """Outcome of a full engine run.

    Two variants share this type, told apart by ``kind``:

    * ``NORMAL`` — the layers ran; ``layer_results`` holds what they returned
      and ``level`` is the worst of them.
    * ``CRITICAL`` — the engine itself failed; ``details`` holds the flattened
      failure text and ``level`` is always Critical.
    """

    kind: ResultKind
    started: datetime | None = None
    finished: datetime | None = None
    layer_results: tuple[LayerResult, ...] = ()
    details: str = ""
    summary: str = ""

    @classmethod
    def normal(
        cls,
        started: datetime,
        finished: datetime,
        layer_results: Sequence[LayerResult],
    ) -> NimatorResult:
        # Wall clocks can step backwards (NTP, DST); finished never precedes started
        finished = max(finished, started)
        return cls(
            kind=ResultKind.NORMAL,
            started=started,
            finished=finished,
            layer_results=tuple(layer_results),
        )

    @classmethod
    def critical(
        cls,
        details: str,
        started: datetime | None = None,
        finished: datetime | None = None,
    ) -> NimatorResult:
        if started is not None and finished is not None:
            finished = max(finished, started)
        return cls(
            kind=ResultKind.CRITICAL,
            started=started,
            finished=finished,
            details=details,
            summary=CRITICAL_SUMMARY,
        )

    @property
    def is_critical(self) -> bool:
        return self.kind is ResultKind.CRITICAL

    @property
    def level(self) -> NotificationLevel:
        if self.is_critical:
            return NotificationLevel.CRITICAL
        return max_level(r.level for r in self.layer_results)

    @property
    def message(self) -> str:
        if self.is_critical:
            return self.summary
        level = self.level
        if level is NotificationLevel.OKAY:
            return "All layers are Okay."
        names = ", ".join(r.name for r in self.layer_results if r.level == level)
        return f"{level.label} reported by layer(s): {names}."

    def render_plain_text(self, threshold: NotificationLevel = NotificationLevel.OKAY) -> str:
        return render_plain_text(self, threshold)


def render_plain_text(result: NimatorResult, threshold: NotificationLevel) -> str:
    """Human-readable report of ``result``.

    Layers and checks below ``threshold`` are left out. A critical result
    always renders its full failure text whatever the threshold.
    """
    if result.kind is ResultKind.CRITICAL:
        return f"{result.summary}\n{result.details}".rstrip("\n")

    lines = [result.message]
    for layer_result in result.layer_results:
        if layer_result.level >= threshold:
            lines.append(layer_result.render_plain_text(threshold))
    return "\n".join(lines)
