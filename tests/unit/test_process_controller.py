"""Tests for ProcessController.restart."""

import pytest

from tests.helpers.watchdog_fakes import FakeProcessTable
from xorctl.process_controller import ProcessController, find_matching_processes
from xorctl.process_controller_helpers import ProcessRecord, ProcessTableError


@pytest.mark.parametrize("count", [0, 1, 3])
def test_restart_kills_every_exact_match(count):
    names = ["M17Gateway"] * count + ["bash", "sshd"]
    table = FakeProcessTable.with_names(*names)

    outcome = ProcessController(table).restart("M17Gateway")

    assert outcome.matched_count == count
    assert outcome.killed_count == count
    assert len(table.terminated) == count
    assert outcome.failures == ()


def test_restart_requires_exact_name():
    table = FakeProcessTable.with_names("M17Gateway2", "M17", "m17gateway", "M17Gateway ", "xM17Gateway")

    outcome = ProcessController(table).restart("M17Gateway")

    assert outcome.matched_count == 0
    assert table.terminated == []


def test_restart_takes_fresh_snapshot_each_call():
    table = FakeProcessTable.with_names("M17Gateway")
    controller = ProcessController(table)

    controller.restart("M17Gateway")
    table.records.append(ProcessRecord(pid=555, name="M17Gateway"))
    second = controller.restart("M17Gateway")

    assert table.snapshots == 2
    assert second.matched_count == 2


def test_restart_continues_after_termination_failure():
    table = FakeProcessTable(
        [ProcessRecord(1, "M17Gateway"), ProcessRecord(2, "M17Gateway"), ProcessRecord(3, "M17Gateway")],
        deny_pids=[2],
    )

    outcome = ProcessController(table).restart("M17Gateway")

    assert outcome.matched_count == 3
    assert outcome.killed_count == 2
    assert table.terminated == [1, 3]
    assert [(failure.pid, failure.reason) for failure in outcome.failures] == [(2, "permission denied")]
    assert outcome.describe() == "restarted 2 of 3 matching processes"


def test_restart_rejects_empty_name():
    with pytest.raises(ValueError):
        ProcessController(FakeProcessTable()).restart("")


def test_restart_propagates_snapshot_failure():
    class BrokenTable(FakeProcessTable):
        def list_processes(self):
            raise ProcessTableError("no /proc")

    with pytest.raises(ProcessTableError):
        ProcessController(BrokenTable()).restart("M17Gateway")


def test_restart_logs_status_lines(xorctl_caplog):
    table = FakeProcessTable([ProcessRecord(77, "M17Gateway")])

    ProcessController(table).restart("M17Gateway")

    messages = [record.getMessage() for record in xorctl_caplog.records]
    assert "[xorctl] Found M17Gateway with PID 77" in messages
    assert "[xorctl] restarted 1 of 1 matching processes" in messages


def test_find_matching_processes_filters_by_name():
    snapshot = [ProcessRecord(1, "a"), ProcessRecord(2, "b"), ProcessRecord(3, "a")]
    assert [record.pid for record in find_matching_processes(snapshot, "a")] == [1, 3]


def test_default_table_is_psutil_backed():
    from xorctl.process_controller_helpers import PsutilProcessTable

    assert isinstance(ProcessController()._table, PsutilProcessTable)


def test_restart_warns_when_terminations_fail(xorctl_caplog):
    table = FakeProcessTable([ProcessRecord(1, "M17Gateway"), ProcessRecord(2, "M17Gateway")], deny_pids=[1, 2])

    outcome = ProcessController(table).restart("M17Gateway")

    assert outcome.failed_count == 2
    assert outcome.killed_count == 0
    warnings = [record.getMessage() for record in xorctl_caplog.records if record.levelname == "WARNING"]
    assert "[xorctl] 2 termination request(s) for M17Gateway failed" in warnings


def test_restart_does_not_warn_when_all_killed(xorctl_caplog):
    ProcessController(FakeProcessTable.with_names("M17Gateway")).restart("M17Gateway")

    assert not any("termination request(s)" in record.getMessage() for record in xorctl_caplog.records)
