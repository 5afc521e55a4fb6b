"""
Process Controller

Finds every running process whose name equals the supervised daemon's name and
asks the OS to terminate it. Relaunching is left to whatever supervises the
daemon; this module only kills.

Usage:
    from xorctl.process_controller import ProcessController

    outcome = ProcessController().restart("M17Gateway")
    print(outcome.describe())
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .logging_config import STATUS_PREFIX
from .process_controller_helpers import (
    ProcessRecord,
    ProcessTable,
    ProcessTerminationError,
    PsutilProcessTable,
    RestartOutcome,
    TerminationFailure,
)

logger = logging.getLogger(__name__)


def find_matching_processes(snapshot: List[ProcessRecord], target_name: str) -> List[ProcessRecord]:
    """Return the records whose name is exactly ``target_name``."""
    return [record for record in snapshot if record.name == target_name]


class ProcessController:
    """Terminates processes by exact name against a live process table."""

    def __init__(self, table: Optional[ProcessTable] = None):
        self._table: ProcessTable = table if table is not None else PsutilProcessTable()

    def restart(self, target_name: str) -> RestartOutcome:
        """
        Kill every process named ``target_name``.

        A full snapshot is taken on every call. Zero matches is a no-op. A
        failure to kill one process is recorded and the remaining matches are
        still attempted.

        Raises:
            ValueError: If ``target_name`` is empty
            ProcessTableError: If the process table cannot be read
        """
        if not target_name:
            raise ValueError("target_name must be a non-empty process name")

        snapshot = self._table.list_processes()
        matches = find_matching_processes(snapshot, target_name)
        if not matches:
            logger.info("%s No %s processes found", STATUS_PREFIX, target_name)
            return RestartOutcome(target_name=target_name, matched_count=0, killed_count=0)

        killed = 0
        failures: List[TerminationFailure] = []
        for record in matches:
            logger.info("%s Found %s with PID %s", STATUS_PREFIX, target_name, record.pid)
            try:
                self._table.terminate(record.pid)
            except ProcessTerminationError as exc:
                logger.warning("%s %s", STATUS_PREFIX, exc)
                failures.append(TerminationFailure(pid=record.pid, reason=exc.reason))
                continue
            killed += 1

        outcome = RestartOutcome(
            target_name=target_name,
            matched_count=len(matches),
            killed_count=killed,
            failures=tuple(failures),
        )
        logger.info("%s %s", STATUS_PREFIX, outcome.describe())
        if outcome.failed_count:
            logger.warning("%s %d termination request(s) for %s failed", STATUS_PREFIX, outcome.failed_count, target_name)
        return outcome


__all__ = ["ProcessController", "find_matching_processes"]
