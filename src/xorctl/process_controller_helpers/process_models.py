from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class ProcessRecord:
    """Read-only view of one entry in the OS process table."""

    pid: int
    name: str


@dataclass(frozen=True)
class TerminationFailure:
    pid: int
    reason: str


@dataclass(frozen=True)
class RestartOutcome:
    """Counts reported by a single restart attempt."""

    target_name: str
    matched_count: int
    killed_count: int
    failures: Tuple[TerminationFailure, ...] = field(default_factory=tuple)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    def describe(self) -> str:
        return f"restarted {self.killed_count} of {self.matched_count} matching processes"
