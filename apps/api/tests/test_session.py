import asyncio

import pytest

from cherrypick.models import CommitStatus
from cherrypick.services.analysis import AnalysisCoordinator
from cherrypick.services.backend_client import BackendClient
from cherrypick.services.execution import COMPLETION_LINE, START_LINE, ExecutionOrchestrator
from cherrypick.services.repositories import RepositoryProvider
from cherrypick.services.session import CherryPickSession, ExecutionLog, SelectionState

from conftest import down_transport, json_transport


def offline_session(delay=0):
    backend = BackendClient(base_url="http://backend.test/api", timeout=0.5, transport=down_transport())
    return CherryPickSession(
        coordinator=AnalysisCoordinator(backend=backend),
        orchestrator=ExecutionOrchestrator(backend, delay=delay),
        provider=RepositoryProvider(backend=backend),
    )


def test_selection_rejects_picked_and_conflict(demo):
    source = demo.source.with_commits(
        [demo.source.commits[0].as_picked(),
         demo.source.commits[1].model_copy(update={"status": CommitStatus.CONFLICT}),
         *demo.source.commits[2:]]
    )
    selection = SelectionState()

    assert selection.toggle(source, "c1") is False
    assert selection.toggle(source, "c2") is False
    assert selection.toggle(source, "nope") is False
    assert selection.toggle(source, "c3") is True
    assert selection.toggle(source, "c3") is False
    assert len(selection) == 0


def test_selection_keeps_registration_order(demo):
    selection = SelectionState()
    for commit_id in ["c4", "c1", "c3"]:
        selection.toggle(demo.source, commit_id)
    assert selection.ids == ["c4", "c1", "c3"]


def test_select_all_toggles(demo):
    source = demo.source.mark_picked(["c2"])
    selection = SelectionState()

    selection.select_all(source)
    assert selection.ids == ["c1", "c3", "c4", "c5", "c6"]

    selection.select_all(source)
    assert selection.ids == []


def test_execution_log_is_append_only_until_reset():
    log = ExecutionLog()
    log.append("a")
    log.append("b")
    assert log.lines == ("a", "b")
    assert list(log) == ["a", "b"]
    log.reset()
    assert len(log) == 0


@pytest.mark.asyncio
async def test_load_falls_back_to_demo_data():
    session = offline_session()
    await session.load()
    assert session.source.id == "repo-src"
    assert session.target.id == "repo-tgt"


@pytest.mark.asyncio
async def test_operations_before_load_are_no_ops():
    session = offline_session()
    assert await session.analyze() is None
    assert await session.execute(["c1"]) is None
    assert session.toggle("c1") is False


@pytest.mark.asyncio
async def test_analysis_prunes_selection_and_logs():
    session = offline_session()
    await session.load()
    session.toggle("c2")
    session.toggle("c1")

    result = await session.analyze()

    assert result.tier == "heuristic"
    assert session.source.get_commit("c2").status is CommitStatus.PICKED
    assert session.selection.ids == ["c1"]
    assert session.log.lines[-1].startswith("Analysis complete via heuristic")


@pytest.mark.asyncio
async def test_successful_batch_clears_selection_and_resets_log():
    session = offline_session()
    await session.load()
    await session.analyze()
    session.toggle("c1")
    session.toggle("c3")

    result = await session.execute()

    assert result.success is True
    assert session.log.lines == tuple(result.logs)
    assert session.log.lines[0] == START_LINE
    assert session.log.lines[-1] == COMPLETION_LINE
    assert len(session.selection) == 0
    assert session.source.get_commit("c1").status is CommitStatus.PICKED
    assert session.source.get_commit("c3").status is CommitStatus.PICKED
    assert [c.status for c in session.target.commits[:2]] == [CommitStatus.PICKED, CommitStatus.PICKED]
    assert session.toggle("c1") is False


@pytest.mark.asyncio
async def test_remote_batch_example():
    session = offline_session()
    await session.load()
    transport = json_transport({
        ("POST", "/api/cherry-pick"): (200, {"success": True, "logs": ["ok c1", "ok c3"]}),
    })
    backend = BackendClient(base_url="http://backend.test/api", transport=transport)
    session.orchestrator = ExecutionOrchestrator(backend, delay=0)
    session.toggle("c1")
    session.toggle("c3")

    result = await session.execute()

    assert result.logs == [START_LINE, "ok c1", "ok c3", COMPLETION_LINE]
    assert len(session.selection) == 0


@pytest.mark.asyncio
async def test_wrong_target_is_a_no_op():
    session = offline_session()
    await session.load()
    session.toggle("c1")
    assert await session.execute(target_repository_id="other") is None
    assert session.selection.ids == ["c1"]


@pytest.mark.asyncio
async def test_concurrent_batches_are_serialized():
    session = offline_session(delay=0.01)
    await session.load()

    first, second = await asyncio.gather(session.execute(["c1"]), session.execute(["c3"]))

    assert first.success and second.success
    assert session.source.get_commit("c1").status is CommitStatus.PICKED
    assert session.source.get_commit("c3").status is CommitStatus.PICKED
    assert len(session.target.commits) == 3


@pytest.mark.asyncio
async def test_from_settings_wires_backend_first(monkeypatch):
    from cherrypick.core.config import settings

    monkeypatch.setattr(settings, "classifier_enabled", False)
    backend = BackendClient(base_url="http://backend.test/api", timeout=0.5, transport=down_transport())

    session = CherryPickSession.from_settings(backend)

    assert session.coordinator.chain.tier_names == ["backend", "local"]
    assert session.orchestrator.chain.tier_names == ["backend", "local"]
    assert session.provider.chain.tier_names[0] == "backend"
    await session.load()
    assert session.is_loaded


@pytest.mark.asyncio
async def test_explicit_ids_cannot_repick_or_pick_conflicts():
    session = offline_session()
    await session.load()
    await session.execute(["c1"])
    session.set_repositories(
        session.source.with_commits([
            c.model_copy(update={"status": CommitStatus.CONFLICT}) if c.id == "c3" else c
            for c in session.source.commits
        ]),
        session.target,
    )
    target_before = session.target
    log_before = session.log.lines

    assert await session.execute(["c1"]) is None
    assert await session.execute(["c4", "c3"]) is None
    assert session.target is target_before
    assert session.log.lines == log_before
    assert session.source.get_commit("c4").status is CommitStatus.READY


@pytest.mark.asyncio
async def test_explicit_ids_keep_the_rest_of_the_selection():
    session = offline_session()
    await session.load()
    session.toggle("c1")
    session.toggle("c3")
    session.toggle("c4")

    result = await session.execute(["c3"])

    assert result.success is True
    assert session.selection.ids == ["c1", "c4"]
