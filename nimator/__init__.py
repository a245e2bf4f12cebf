"""Nimator — layered health checks with fail-fast ordering and safe reporting."""

from nimator.engine import (
    Check,
    CheckResult,
    ConfigurationError,
    Layer,
    LayerContractError,
    LayerResult,
    NimatorEngine,
    NimatorResult,
    NotificationLevel,
    render_plain_text,
)

__all__ = [
    "Check",
    "CheckResult",
    "ConfigurationError",
    "Layer",
    "LayerContractError",
    "LayerResult",
    "NimatorEngine",
    "NimatorResult",
    "NotificationLevel",
    "render_plain_text",
]
