from typing import Optional

from cherrypick.services.analysis import AnalysisCoordinator
from cherrypick.services.execution import ExecutionOrchestrator
from cherrypick.services.repositories import RepositoryProvider
from cherrypick.services.session import CherryPickSession

# The backend serves its own repositories and never calls out to a backend.
# Its batch logs carry only per-commit lines; the calling client frames them.
_session: Optional[CherryPickSession] = None


def build_backend_session() -> CherryPickSession:
    return CherryPickSession(
        coordinator=AnalysisCoordinator.from_settings(backend=None),
        orchestrator=ExecutionOrchestrator(backend=None, framed=False),
        provider=RepositoryProvider.from_settings(backend=None),
    )


def set_session(session: Optional[CherryPickSession]) -> None:
    global _session
    _session = session


async def get_session() -> CherryPickSession:
    """Backend session dependency, loaded on first use"""
    global _session
    if _session is None:
        _session = build_backend_session()
    if not _session.is_loaded:
        await _session.load()
    return _session


def get_coordinator() -> AnalysisCoordinator:
    return AnalysisCoordinator.from_settings(backend=None)
