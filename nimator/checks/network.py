"""Network checks — HTTP(S), TLS cert expiry, DNS resolve, TCP connect.

Expected network failures never raise; they are reported as Error-level
results so the layer (and the engine) can decide what to do with them.
"""

from __future__ import annotations

import socket
import ssl
import time
from datetime import datetime, timezone

import httpx

from ..engine.models import CheckResult, NotificationLevel


class HttpCheck:
    """HTTP(S) request with status code + latency budget."""

    def __init__(
        self,
        name: str,
        url: str,
        method: str = "GET",
        expected_status: int = 200,
        timeout_ms: int = 10_000,
        slow_ms: int = 3_000,
    ) -> None:
        self.name = name
        self.url = url
        self.method = method
        self.expected_status = expected_status
        self.timeout_ms = timeout_ms
        self.slow_ms = slow_ms

    def run(self) -> CheckResult:
        t0 = time.perf_counter()
        try:
            with httpx.Client(timeout=self.timeout_ms / 1000, follow_redirects=True) as client:
                resp = client.request(self.method, self.url)
        except httpx.TimeoutException:
            return CheckResult(
                self.name, NotificationLevel.ERROR,
                f"{self.method} {self.url} timed out ({self.timeout_ms}ms)",
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return CheckResult(
                self.name, NotificationLevel.ERROR,
                f"{self.method} {self.url} failed: {type(e).__name__}: {e}",
            )
        latency = (time.perf_counter() - t0) * 1000

        if resp.status_code != self.expected_status:
            return CheckResult(
                self.name, NotificationLevel.ERROR,
                f"Expected {self.expected_status}, got {resp.status_code}",
            )
        if latency > self.slow_ms:
            return CheckResult(
                self.name, NotificationLevel.WARNING,
                f"{resp.status_code} OK but slow ({latency:.0f}ms > {self.slow_ms}ms)",
            )
        return CheckResult(self.name, NotificationLevel.OKAY, f"{resp.status_code} OK ({latency:.0f}ms)")


class TlsExpiryCheck:
    """Warns before the server certificate expires, errors once it has."""

    def __init__(
        self,
        name: str,
        hostname: str,
        port: int = 443,
        warn_days_before: int = 14,
        timeout_ms: int = 10_000,
    ) -> None:
        self.name = name
        self.hostname = hostname
        self.port = port
        self.warn_days_before = warn_days_before
        self.timeout_ms = timeout_ms

    def _fetch_cert(self) -> dict:
        ctx = ssl.create_default_context()
        with socket.create_connection((self.hostname, self.port), timeout=self.timeout_ms / 1000) as sock:
            with ctx.wrap_socket(sock, server_hostname=self.hostname) as ssock:
                return ssock.getpeercert() or {}

    def run(self) -> CheckResult:
        try:
            cert = self._fetch_cert()
        except (OSError, ssl.SSLError, UnicodeError) as e:
            return CheckResult(self.name, NotificationLevel.ERROR, f"TLS error: {type(e).__name__}: {e}")

        not_after = cert.get("notAfter", "")
        if not not_after:
            return CheckResult(self.name, NotificationLevel.ERROR, "No certificate returned")

        try:
            expiry = datetime.strptime(not_after, "%b %d %H:%M:%S %Y %Z").replace(tzinfo=timezone.utc)
        except ValueError:
            return CheckResult(self.name, NotificationLevel.ERROR, f"Unreadable certificate expiry: {not_after!r}")
        days_left = (expiry - datetime.now(timezone.utc)).days

        if days_left < 0:
            return CheckResult(self.name, NotificationLevel.ERROR, f"Certificate EXPIRED {-days_left} days ago")
        if days_left < self.warn_days_before:
            return CheckResult(
                self.name, NotificationLevel.WARNING,
                f"Certificate expires in {days_left} days (warn < {self.warn_days_before})",
            )
        return CheckResult(self.name, NotificationLevel.OKAY, f"Certificate valid, expires in {days_left} days")


class DnsCheck:
    """Hostname must resolve."""

    def __init__(self, name: str, hostname: str) -> None:
        self.name = name
        self.hostname = hostname

    def run(self) -> CheckResult:
        try:
            addrs = socket.getaddrinfo(self.hostname, None)
        except (socket.gaierror, UnicodeError) as e:
            return CheckResult(self.name, NotificationLevel.ERROR, f"DNS resolution failed: {e}")

        ips = sorted({a[4][0] for a in addrs})
        return CheckResult(self.name, NotificationLevel.OKAY, f"Resolved to {', '.join(ips[:3])}")


class TcpCheck:
    """Raw TCP port connectivity."""

    def __init__(self, name: str, hostname: str, port: int = 443, timeout_ms: int = 5_000) -> None:
        self.name = name
        self.hostname = hostname
        self.port = port
        self.timeout_ms = timeout_ms

    def run(self) -> CheckResult:
        try:
            sock = socket.create_connection((self.hostname, self.port), timeout=self.timeout_ms / 1000)
            sock.close()
        except (OSError, UnicodeError) as e:
            return CheckResult(
                self.name, NotificationLevel.ERROR,
                f"TCP connect to {self.hostname}:{self.port} failed: {type(e).__name__}: {e}",
            )
        return CheckResult(self.name, NotificationLevel.OKAY, f"Port {self.port} open")
