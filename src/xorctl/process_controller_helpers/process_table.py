"""OS process table access backed by psutil."""

from __future__ import annotations

import logging
from typing import List, Protocol

import psutil

from .errors import ProcessTableError, ProcessTerminationError
from .process_models import ProcessRecord

logger = logging.getLogger(__name__)


class ProcessTable(Protocol):
    """Minimal capability needed to find and stop processes."""

    def list_processes(self) -> List[ProcessRecord]: ...

    def terminate(self, pid: int) -> None: ...


class PsutilProcessTable:
    """
    Live process table.

    ``force=True`` sends SIGKILL (``Process.kill``); otherwise SIGTERM is sent via
    ``Process.terminate``. Neither variant waits for the process to exit.
    """

    def __init__(self, *, force: bool = True):
        self.force = force

    def list_processes(self) -> List[ProcessRecord]:
        """Take a fresh snapshot of every visible process."""
        records: List[ProcessRecord] = []
        try:
            # process_iter skips processes that exit mid-scan and reports unreadable fields as None
            for proc in psutil.process_iter(["pid", "name"]):
                pid = proc.info.get("pid")
                name = proc.info.get("name")
                if pid is None or not name:
                    continue
                records.append(ProcessRecord(pid=int(pid), name=str(name)))
        except (psutil.Error, OSError) as exc:
            raise ProcessTableError(f"Failed to enumerate processes: {exc}") from exc
        logger.debug("Process snapshot contains %d entries", len(records))
        return records

    def terminate(self, pid: int) -> None:
        """Request termination of ``pid`` without waiting for it to exit."""
        try:
            proc = psutil.Process(pid)
            if self.force:
                proc.kill()
            else:
                proc.terminate()
        except psutil.NoSuchProcess as exc:
            raise ProcessTerminationError.no_such_process(pid) from exc
        except psutil.AccessDenied as exc:
            raise ProcessTerminationError.access_denied(pid) from exc
        except OSError as exc:
            raise ProcessTerminationError(pid, str(exc)) from exc
