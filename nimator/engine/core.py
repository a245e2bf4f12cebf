"""Nimator engine — runs layers in order and never lets a failure escape.

Layers run one at a time. As soon as a layer reports Error or worse the run
stops; that layer's result is kept, later layers are skipped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime

from .clock import Clock, SystemClock
from .failures import describe_exception
from .layer import Check, Layer, LayerBase
from .models import LayerResult, NimatorResult, NotificationLevel

logger = logging.getLogger(__name__)

STOP_PROCESSING_AT = NotificationLevel.ERROR


class ConfigurationError(ValueError):
    """The engine was constructed with an invalid argument."""

    def __init__(self, param_name: str, message: str) -> None:
        super().__init__(message)
        self.param_name = param_name


class LayerContractError(RuntimeError):
    """A layer broke its contract (e.g. returned no result)."""


class NimatorEngine:
    """Runs layers sequentially and aggregates their results."""

    def __init__(
        self,
        layers: Iterable[LayerBase] | None = (),
        clock: Clock | None = None,
    ) -> None:
        if layers is None:
            raise ConfigurationError("layers", "Argument 'layers' must not be None")
        self._layers: list[LayerBase] = list(layers)
        self._clock: Clock = clock or SystemClock()
        self._running = False

    @property
    def layers(self) -> tuple[LayerBase, ...]:
        return tuple(self._layers)

    # -- Running --------------------------------------------------------------

    def run_safe(self) -> NimatorResult:
        """Run all layers; any failure becomes a Critical result instead of raising.

        A ``CancelledError`` escaping an asynchronous check is contained too;
        the engine is synchronous, so it never means the caller was cancelled.
        KeyboardInterrupt and SystemExit still propagate.
        """
        started: datetime | None = None
        try:
            started = self._clock.now()
            return self._run_from(started)
        except (Exception, asyncio.CancelledError) as exc:
            logger.exception("Nimator run failed")
            details = f"Nimator itself failed: {describe_exception(exc)}"
            return NimatorResult.critical(details, started=started, finished=self._finished_or_none(started))

    def run_unsafe(self) -> NimatorResult:
        """Run all layers, letting any failure propagate."""
        return self._run_from(self._clock.now())

    def _run_from(self, started: datetime) -> NimatorResult:
        if self._running:
            raise RuntimeError("Nimator engine is already running")
        self._running = True
        try:
            layer_results = self._run_layers()
        finally:
            self._running = False

        finished = self._clock.now()
        result = NimatorResult.normal(started, finished, layer_results)
        logger.info(
            "Nimator run finished: %s (%d/%d layers)",
            result.level.label, len(layer_results), len(self._layers),
        )
        return result

    def _run_layers(self) -> list[LayerResult]:
        layer_results: list[LayerResult] = []
        for layer in self._layers:
            layer_result = layer.run()

            if layer_result is None:
                raise LayerContractError(
                    f"Layer {layer.name} returned no result. Cannot continue because "
                    "we now cannot determine error level of that layer."
                )

            layer_results.append(layer_result)

            if layer_result.level >= STOP_PROCESSING_AT:
                logger.warning(
                    "Layer %s reported %s, skipping remaining layers",
                    layer.name, layer_result.level.label,
                )
                break
        return layer_results

    def _finished_or_none(self, started: datetime | None) -> datetime | None:
        # The clock may be what failed; a critical result then has no timestamps
        if started is None:
            return None
        try:
            return self._clock.now()
        except Exception:
            logger.warning("Clock failed while recording a failed run", exc_info=True)
            return started

    # -- Layers ---------------------------------------------------------------

    def add_layer(self, layer: LayerBase | str, checks: Iterable[Check] | None = None) -> None:
        """Append a layer.

        Pass either a prebuilt layer, or a name and its checks:
        ``add_layer(layer)`` / ``add_layer("name", [check_a, check_b])``.
        """
        if self._running:
            raise RuntimeError("Cannot add a layer while the engine is running")
        if isinstance(layer, str):
            if checks is None:
                raise ValueError(f"Layer {layer!r}: 'checks' is required when adding by name")
            layer = Layer(layer, checks)
        elif checks is not None:
            raise TypeError("'checks' is only accepted together with a layer name")
        self._layers.append(layer)
