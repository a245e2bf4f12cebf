"""Checks and layers — the units the engine executes."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Iterable
from typing import Any, Protocol, runtime_checkable

from .models import CheckResult, LayerResult

logger = logging.getLogger(__name__)


@runtime_checkable
class Check(Protocol):
    """Smallest evaluated unit. ``run`` may return an awaitable result."""

    def run(self) -> CheckResult | Awaitable[CheckResult]: ...


class LayerBase(Protocol):
    """Anything the engine can run as a layer."""

    name: str

    def run(self) -> LayerResult | None: ...


async def _await_result(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def run_check(check: Check) -> CheckResult:
    """Run ``check`` to completion, waiting for it if it is asynchronous.

    Asynchronous checks get their own event loop, so they cannot run while
    the calling thread already has a loop running. Call the engine from a
    worker thread (e.g. ``loop.run_in_executor``) in that case.
    """
    outcome = check.run()
    if inspect.isawaitable(outcome):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            outcome = asyncio.run(_await_result(outcome))
        else:
            if inspect.iscoroutine(outcome):
                outcome.close()
            raise RuntimeError(
                f"Check {check!r} is asynchronous and cannot run inside a running event loop; "
                "run the engine in a worker thread instead"
            )
    if not isinstance(outcome, CheckResult):
        raise TypeError(
            f"Check {check!r} returned {type(outcome).__name__} instead of a CheckResult"
        )
    return outcome


class Layer:
    """A named, ordered group of checks evaluated as one unit.

    Checks run one after the other. An exception raised by a check is not
    caught here; it ends the layer run and is left to the engine.
    """

    def __init__(self, name: str, checks: Iterable[Check]) -> None:
        if checks is None:
            raise ValueError("Layer 'checks' is required")
        self.name = name
        self.checks: tuple[Check, ...] = tuple(checks)

    def run(self) -> LayerResult:
        results = []
        for check in self.checks:
            result = run_check(check)
            logger.debug("Layer %s: check %s -> %s", self.name, result.name, result.level.label)
            results.append(result)
        return LayerResult(self.name, results)

    def __repr__(self) -> str:
        return f"Layer(name={self.name!r}, checks={len(self.checks)})"
