"""Bundled checks and the type-keyed factory used by the settings loader."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..engine.layer import Check
from .network import DnsCheck, HttpCheck, TcpCheck, TlsExpiryCheck
from .noop import NoopCheck

# Dispatcher
CHECK_TYPES: dict[str, Callable[..., Check]] = {
    "noop": NoopCheck,
    "http": HttpCheck,
    "tls": TlsExpiryCheck,
    "dns": DnsCheck,
    "tcp": TcpCheck,
}


def build_check(definition: dict[str, Any]) -> Check:
    """Build a check from ``{"type": ..., **options}``.

    Raises ``ValueError`` for an unknown type and ``TypeError`` when the
    options do not match the check's arguments.
    """
    options = dict(definition)
    check_type = str(options.pop("type", "")).strip().lower()
    factory = CHECK_TYPES.get(check_type)
    if factory is None:
        known = ", ".join(sorted(CHECK_TYPES))
        raise ValueError(f"Unknown check type: {check_type!r} (known: {known})")
    options.setdefault("name", check_type)
    return factory(**options)


__all__ = [
    "CHECK_TYPES",
    "DnsCheck",
    "HttpCheck",
    "NoopCheck",
    "TcpCheck",
    "TlsExpiryCheck",
    "build_check",
]
