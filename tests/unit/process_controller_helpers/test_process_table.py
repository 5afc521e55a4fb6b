"""Tests for PsutilProcessTable."""

from types import SimpleNamespace

import psutil
import pytest

from xorctl.process_controller_helpers import (
    ProcessRecord,
    ProcessTableError,
    ProcessTerminationError,
    PsutilProcessTable,
)
from xorctl.process_controller_helpers import process_table as process_table_module


class _FakeProc:
    def __init__(self, pid, *, error=None):
        self.pid = pid
        self.error = error
        self.killed = False
        self.terminated = False

    def kill(self):
        if self.error:
            raise self.error
        self.killed = True

    def terminate(self):
        if self.error:
            raise self.error
        self.terminated = True


def _entry(pid, name):
    return SimpleNamespace(info={"pid": pid, "name": name})


def test_list_processes_builds_records(monkeypatch):
    entries = [_entry(1, "systemd"), _entry(42, "M17Gateway"), _entry(43, None), _entry(None, "ghost")]
    requested = {}

    def fake_iter(attrs):
        requested["attrs"] = attrs
        return iter(entries)

    monkeypatch.setattr(process_table_module.psutil, "process_iter", fake_iter)

    records = PsutilProcessTable().list_processes()

    assert requested["attrs"] == ["pid", "name"]
    assert records == [ProcessRecord(1, "systemd"), ProcessRecord(42, "M17Gateway")]


def test_list_processes_wraps_enumeration_failure(monkeypatch):
    def fake_iter(attrs):
        raise psutil.AccessDenied()

    monkeypatch.setattr(process_table_module.psutil, "process_iter", fake_iter)

    with pytest.raises(ProcessTableError):
        PsutilProcessTable().list_processes()


def test_list_processes_reads_live_table():
    records = PsutilProcessTable().list_processes()
    assert records
    assert all(isinstance(record.pid, int) and record.name for record in records)


def test_terminate_force_kills(monkeypatch):
    proc = _FakeProc(7)
    monkeypatch.setattr(process_table_module.psutil, "Process", lambda pid: proc)

    PsutilProcessTable().terminate(7)

    assert proc.killed is True
    assert proc.terminated is False


def test_terminate_graceful_sends_sigterm(monkeypatch):
    proc = _FakeProc(7)
    monkeypatch.setattr(process_table_module.psutil, "Process", lambda pid: proc)

    PsutilProcessTable(force=False).terminate(7)

    assert proc.terminated is True
    assert proc.killed is False


def test_terminate_missing_process(monkeypatch):
    def fake_process(pid):
        raise psutil.NoSuchProcess(pid)

    monkeypatch.setattr(process_table_module.psutil, "Process", fake_process)

    with pytest.raises(ProcessTerminationError) as excinfo:
        PsutilProcessTable().terminate(9)

    assert excinfo.value.pid == 9
    assert excinfo.value.reason == "process no longer exists"


def test_terminate_access_denied(monkeypatch):
    proc = _FakeProc(11, error=psutil.AccessDenied(11))
    monkeypatch.setattr(process_table_module.psutil, "Process", lambda pid: proc)

    with pytest.raises(ProcessTerminationError) as excinfo:
        PsutilProcessTable().terminate(11)

    assert excinfo.value.reason == "permission denied"
    assert str(excinfo.value) == "Could not kill process 11: permission denied"


def test_terminate_os_error(monkeypatch):
    proc = _FakeProc(12, error=OSError("boom"))
    monkeypatch.setattr(process_table_module.psutil, "Process", lambda pid: proc)

    with pytest.raises(ProcessTerminationError) as excinfo:
        PsutilProcessTable().terminate(12)

    assert excinfo.value.reason == "boom"
