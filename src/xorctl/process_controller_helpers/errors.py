"""Exceptions raised by process table implementations."""

from __future__ import annotations


class ProcessTableError(RuntimeError):
    """Raised when the OS process table cannot be enumerated."""


class ProcessTerminationError(RuntimeError):
    """Raised when a termination request for a single process is rejected."""

    def __init__(self, pid: int, reason: str):
        super().__init__(f"Could not kill process {pid}: {reason}")
        self.pid = pid
        self.reason = reason

    @classmethod
    def no_such_process(cls, pid: int) -> "ProcessTerminationError":
        return cls(pid, "process no longer exists")

    @classmethod
    def access_denied(cls, pid: int) -> "ProcessTerminationError":
        return cls(pid, "permission denied")
