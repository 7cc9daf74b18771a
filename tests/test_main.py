"""Tests for command dispatch."""
import pytest

from conftest import FakeContainer, names
from tab_organizer.main import COMMANDS, run, run_command, run_operation
from tab_organizer.outcomes import Outcome


class RecordingNotifier:
    def __init__(self):
        self.reports = []

    async def async_report(self, result):
        self.reports.append(result)


@pytest.mark.asyncio
async def test_run_operation_dispatches_each_command(make_workspace):
    ws = make_workspace({"A": ["b", "a", "b"]})

    dedup = await run_operation(ws, "dedup", settle_time=0)
    sort = await run_operation(ws, "sort", settle_time=0)

    assert [r.outcome for r in dedup] == [Outcome.DUPLICATES_REMOVED]
    assert [r.outcome for r in sort] == [Outcome.SORTED]
    assert names(ws.containers[0]) == ["a", "b"]


@pytest.mark.asyncio
async def test_run_operation_rejects_unknown_command(workspace):
    with pytest.raises(ValueError):
        await run_operation(workspace, "shuffle", settle_time=0)


@pytest.mark.asyncio
async def test_run_command_reports_every_result(workspace):
    group = workspace.add_container(FakeContainer("A"))
    workspace.add_tab(group, name="b")
    workspace.add_tab(group, name="a")
    notifier = RecordingNotifier()

    await run_command(workspace, notifier, "organize", settle_time=0)

    assert [r.outcome for r in notifier.reports] == [Outcome.NO_DUPLICATES, Outcome.SORTED]


@pytest.mark.asyncio
async def test_run_command_never_raises(workspace):
    class ExplodingWorkspace:
        def iterate_all_leaves(self):
            raise RuntimeError("host went away")

    notifier = RecordingNotifier()

    await run_command(ExplodingWorkspace(), notifier, "sort", settle_time=0)

    assert notifier.reports == []


def test_unknown_cli_command_exits():
    with pytest.raises(SystemExit) as exc_info:
        run(["shuffle"])

    assert exc_info.value.code == 2


def test_command_names():
    assert set(COMMANDS) == {"sort", "dedup", "organize"}
