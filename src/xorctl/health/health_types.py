"""Health classification for the status probe."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DISCONNECTED_MARKER = "disc"
RESPONSE_ENCODING = "utf-8"


class HealthState(Enum):
    """Outcome of a single status probe"""

    HEALTHY = "healthy"
    DISCONNECTED = "disconnected"
    PROBE_FAILED = "probe_failed"


@dataclass(frozen=True)
class HealthStatus:
    """Result of one probe. ``reason`` is only set for probe failures."""

    state: HealthState
    reason: Optional[str] = None
    response: Optional[str] = None

    @classmethod
    def healthy(cls, response: Optional[str] = None) -> "HealthStatus":
        return cls(state=HealthState.HEALTHY, response=response)

    @classmethod
    def disconnected(cls, response: Optional[str] = None) -> "HealthStatus":
        return cls(state=HealthState.DISCONNECTED, response=response)

    @classmethod
    def probe_failed(cls, reason: str) -> "HealthStatus":
        return cls(state=HealthState.PROBE_FAILED, reason=reason)

    @property
    def is_healthy(self) -> bool:
        return self.state is HealthState.HEALTHY

    @property
    def is_disconnected(self) -> bool:
        return self.state is HealthState.DISCONNECTED

    @property
    def is_failure(self) -> bool:
        return self.state is HealthState.PROBE_FAILED

    def describe(self) -> str:
        """Status line text for this outcome."""
        if self.is_failure:
            return f"probe failed: {self.reason}"
        if self.is_disconnected:
            return "probe reported disconnected"
        return "probe ok"


def decode_response(payload: bytes) -> str:
    """Decode a response datagram, replacing invalid sequences instead of failing."""
    return payload.decode(RESPONSE_ENCODING, errors="replace")


def classify_response(text: str, marker: str = DISCONNECTED_MARKER) -> HealthStatus:
    """
    Classify a decoded status response.

    Any occurrence of ``marker`` (case-sensitive) means the daemon reports
    itself disconnected; every other response counts as healthy.
    """
    if marker in text:
        return HealthStatus.disconnected(text)
    return HealthStatus.healthy(text)
