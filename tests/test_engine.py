"""Tests for the Nimator engine."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from nimator.engine import (
    ConfigurationError,
    LayerContractError,
    LayerResult,
    NimatorEngine,
    NotificationLevel,
    SteppingClock,
)

START = datetime(2016, 8, 16, 13, 0, 0, tzinfo=timezone.utc)


class BrokenClock:
    def now(self):
        raise RuntimeError("Something truly terrible happened...")


class BackwardsClock:
    """Steps back one second per read, like a wall clock being corrected."""

    def __init__(self) -> None:
        self._next = START

    def now(self):
        current = self._next
        self._next -= timedelta(seconds=1)
        return current


def raising_layer(exc: BaseException, name: str = "boom") -> MagicMock:
    layer = MagicMock()
    layer.name = name
    layer.run.side_effect = exc
    return layer


def chained(outer: str, inner: str) -> Exception:
    try:
        try:
            raise ValueError(inner)
        except ValueError as e:
            raise RuntimeError(outer) from e
    except RuntimeError as e:
        return e


# ── Construction ─────────────────────────────────────────────────────────────


class TestConstruction:
    def test_none_layers_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as excinfo:
            NimatorEngine(None)
        assert excinfo.value.param_name == "layers"
        assert "layers" in str(excinfo.value)

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            NimatorEngine(layers=None)

    def test_default_has_no_layers(self) -> None:
        assert NimatorEngine().layers == ()


# ── Ordering and early stop ──────────────────────────────────────────────────


class TestRunOrder:
    def test_calls_each_layer_once(self, clock, make_layer) -> None:
        layer1 = make_layer(NotificationLevel.OKAY, "layer 1")
        layer2 = make_layer(NotificationLevel.OKAY, "layer 2")
        result = NimatorEngine([layer1, layer2], clock=clock).run_safe()

        layer1.run.assert_called_once_with()
        layer2.run.assert_called_once_with()
        assert result.level == NotificationLevel.OKAY

    def test_returns_layer_results_in_order(self, clock) -> None:
        result1 = LayerResult("layer 1", [])
        result2 = LayerResult("layer 2", [])
        layer1, layer2 = MagicMock(), MagicMock()
        layer1.run.return_value = result1
        layer2.run.return_value = result2

        result = NimatorEngine([layer1, layer2], clock=clock).run_safe()

        assert result.layer_results == (result1, result2)
        assert result.layer_results[0] is result1

    @pytest.mark.parametrize("level", [NotificationLevel.ERROR, NotificationLevel.CRITICAL])
    def test_stops_processing_at_threshold(self, clock, make_layer, level) -> None:
        layer1 = make_layer(level, "layer 1")
        layer2 = MagicMock()

        result = NimatorEngine([layer1, layer2], clock=clock).run_safe()

        layer2.run.assert_not_called()
        assert result.level == level
        # the layer that stopped the run keeps its result
        assert [r.name for r in result.layer_results] == ["layer 1"]

    def test_warning_does_not_stop(self, clock, make_layer) -> None:
        layer1 = make_layer(NotificationLevel.WARNING, "layer 1")
        layer2 = make_layer(NotificationLevel.OKAY, "layer 2")

        result = NimatorEngine([layer1, layer2], clock=clock).run_safe()

        layer2.run.assert_called_once_with()
        assert result.level == NotificationLevel.WARNING
        assert len(result.layer_results) == 2

    def test_stop_in_middle(self, clock, make_layer) -> None:
        layers = [
            make_layer(NotificationLevel.OKAY, "a"),
            make_layer(NotificationLevel.ERROR, "b"),
            make_layer(NotificationLevel.OKAY, "c"),
        ]
        result = NimatorEngine(layers, clock=clock).run_safe()

        assert [r.name for r in result.layer_results] == ["a", "b"]
        layers[2].run.assert_not_called()

    def test_repeated_runs_are_independent(self, clock, make_layer) -> None:
        layer = make_layer(NotificationLevel.OKAY)
        engine = NimatorEngine([layer], clock=clock)

        first = engine.run_safe()
        second = engine.run_safe()

        assert layer.run.call_count == 2
        assert second.started > first.finished


# ── Timestamps ───────────────────────────────────────────────────────────────


class TestTimestamps:
    def test_start_and_finish_from_clock(self, make_layer) -> None:
        clock = SteppingClock(START, step=timedelta(seconds=15))
        engine = NimatorEngine(
            [make_layer(NotificationLevel.OKAY), make_layer(NotificationLevel.OKAY)],
            clock=clock,
        )

        result = engine.run_safe()

        assert result.started == START + timedelta(seconds=15)
        assert result.finished > result.started

    def test_empty_engine(self, clock) -> None:
        result = NimatorEngine([], clock=clock).run_safe()
        assert result.level == NotificationLevel.OKAY
        assert result.layer_results == ()
        assert result.finished >= result.started

    def test_failed_run_still_has_times(self, clock) -> None:
        engine = NimatorEngine(clock=clock)
        engine.add_layer(raising_layer(Exception()))

        result = engine.run_safe()

        assert result.level == NotificationLevel.CRITICAL
        assert result.started is not None
        assert result.finished is not None
        assert result.finished >= result.started

    def test_clock_failure_is_critical(self) -> None:
        engine = NimatorEngine([], clock=BrokenClock())

        result = engine.run_safe()

        assert result.level == NotificationLevel.CRITICAL
        assert "truly terrible" in result.render_plain_text(NotificationLevel.ERROR)
        assert result.started is None
        assert result.finished is None

    def test_clock_stepping_backwards_is_not_critical(self, make_layer) -> None:
        engine = NimatorEngine([make_layer(NotificationLevel.OKAY)], clock=BackwardsClock())

        result = engine.run_safe()

        assert not result.is_critical
        assert result.level == NotificationLevel.OKAY
        assert result.started == START
        assert result.finished == result.started


# ── Failure containment ──────────────────────────────────────────────────────


class TestFailureContainment:
    def test_layer_returning_none(self, clock) -> None:
        layer = MagicMock()
        layer.name = "flaky layer"
        layer.run.return_value = None

        result = NimatorEngine([layer], clock=clock).run_safe()

        assert result.level == NotificationLevel.CRITICAL
        assert "nimator" in result.message.lower()
        assert "failed" in result.message.lower()
        text = result.render_plain_text(NotificationLevel.ERROR).lower()
        assert "flaky layer" in text
        assert "returned no result" in text

    def test_layer_returning_none_raises_unsafe(self, clock) -> None:
        layer = MagicMock()
        layer.name = "flaky layer"
        layer.run.return_value = None

        with pytest.raises(LayerContractError, match="returned no result"):
            NimatorEngine([layer], clock=clock).run_unsafe()

    def test_group_with_one_exception(self, clock) -> None:
        engine = NimatorEngine(clock=clock)
        engine.add_layer(raising_layer(ExceptionGroup("checks failed", [Exception("failure1")])))

        result = engine.run_safe()

        assert result.level == NotificationLevel.CRITICAL
        assert "failure1" in result.render_plain_text(NotificationLevel.CRITICAL)

    def test_group_with_multiple_exceptions(self, clock) -> None:
        engine = NimatorEngine(clock=clock)
        engine.add_layer(raising_layer(ExceptionGroup(
            "checks failed", [Exception("failure1"), Exception("failure2"), Exception("failure3")],
        )))

        result = engine.run_safe()

        text = result.render_plain_text(NotificationLevel.CRITICAL)
        assert result.level == NotificationLevel.CRITICAL
        assert "failure1" in text
        assert "failure2" in text
        assert "failure3" in text

    def test_chained_exception(self, clock) -> None:
        engine = NimatorEngine(clock=clock)
        engine.add_layer(raising_layer(chained("failure1", "innerFailure")))

        result = engine.run_safe()

        text = result.render_plain_text(NotificationLevel.CRITICAL)
        assert result.level == NotificationLevel.CRITICAL
        assert "failure1" in text
        assert "innerFailure" in text

    def test_doubly_nested_exception_from_check(self, clock) -> None:
        check = MagicMock()
        try:
            try:
                try:
                    raise KeyError("deepest")
                except KeyError as e:
                    raise OSError("middle") from e
            except OSError as e:
                raise RuntimeError("outer") from e
        except RuntimeError as e:
            check.run.side_effect = e

        engine = NimatorEngine(clock=clock)
        engine.add_layer("checks", [check])
        result = engine.run_safe()

        text = result.render_plain_text(NotificationLevel.CRITICAL)
        assert "outer\n\tmiddle\n\t\t'deepest'" in text

    def test_cancelled_check_is_contained(self, clock) -> None:
        check = MagicMock()
        check.run.side_effect = asyncio.CancelledError()
        engine = NimatorEngine(clock=clock)
        engine.add_layer("checks", [check])

        result = engine.run_safe()

        assert result.level == NotificationLevel.CRITICAL
        assert "CancelledError" in result.render_plain_text(NotificationLevel.CRITICAL)

    def test_keyboard_interrupt_propagates(self, clock) -> None:
        engine = NimatorEngine([raising_layer(KeyboardInterrupt())], clock=clock)
        with pytest.raises(KeyboardInterrupt):
            engine.run_safe()

    def test_unsafe_run_propagates(self, clock) -> None:
        engine = NimatorEngine([raising_layer(RuntimeError("nope"))], clock=clock)
        with pytest.raises(RuntimeError, match="nope"):
            engine.run_unsafe()


# ── add_layer ────────────────────────────────────────────────────────────────


class TestAddLayer:
    def test_from_parts_creates_layer(self, clock, make_check) -> None:
        engine = NimatorEngine(clock=clock)
        engine.add_layer("dummy name", [make_check(NotificationLevel.WARNING, "check A")])

        result = engine.run_safe()

        assert result.level == NotificationLevel.WARNING
        assert engine.layers[0].name == "dummy name"

    def test_prebuilt_layer_appended(self, clock, make_layer) -> None:
        engine = NimatorEngine([make_layer(NotificationLevel.OKAY, "first")], clock=clock)
        engine.add_layer(make_layer(NotificationLevel.OKAY, "second"))

        result = engine.run_safe()

        assert [r.name for r in result.layer_results] == ["first", "second"]

    def test_name_without_checks_rejected(self) -> None:
        with pytest.raises(ValueError):
            NimatorEngine().add_layer("lonely")

    def test_constructor_input_is_copied(self, clock, make_layer) -> None:
        layers = [make_layer(NotificationLevel.OKAY)]
        engine = NimatorEngine(layers, clock=clock)
        layers.append(make_layer(NotificationLevel.ERROR))

        assert len(engine.layers) == 1

    def test_cannot_add_layer_during_run(self, clock, make_layer) -> None:
        engine = NimatorEngine(clock=clock)
        layer = MagicMock()
        layer.name = "sneaky"

        def run():
            engine.add_layer(make_layer(NotificationLevel.OKAY))

        layer.run.side_effect = run
        engine.add_layer(layer)

        result = engine.run_safe()

        assert result.level == NotificationLevel.CRITICAL
        assert "while the engine is running" in result.render_plain_text()
        assert len(engine.layers) == 1
