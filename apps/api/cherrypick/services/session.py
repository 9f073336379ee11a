"""
Operator session: the repositories, the commit selection and the execution log.

The session owns the current repository snapshots. Analysis and execution
return new snapshots which the session swaps in, one operation at a time.
"""
import asyncio
import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from cherrypick.models import AnalysisResult, ExecutionResult, Repository
from cherrypick.services.analysis import AnalysisCoordinator
from cherrypick.services.backend_client import BackendClient
from cherrypick.services.execution import ExecutionOrchestrator, LogCallback
from cherrypick.services.repositories import RepositoryProvider

logger = logging.getLogger(__name__)


class ExecutionLog:
    """Append-only log of the current batch"""

    def __init__(self):
        self._lines: List[str] = []

    def append(self, line: str) -> None:
        self._lines.append(line)

    def reset(self) -> None:
        self._lines = []

    @property
    def lines(self) -> Tuple[str, ...]:
        return tuple(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self._lines)


class SelectionState:
    """Ordered set of selected source commit ids"""

    def __init__(self):
        self._ids: Dict[str, None] = {}

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def __contains__(self, commit_id: str) -> bool:
        return commit_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def toggle(self, source: Repository, commit_id: str) -> bool:
        """Flip one commit; returns whether it is selected afterwards."""
        if commit_id in self._ids:
            del self._ids[commit_id]
            return False
        commit = source.get_commit(commit_id)
        if commit is None or not commit.is_selectable:
            return False
        self._ids[commit_id] = None
        return True

    def select_all(self, source: Repository) -> None:
        """Select every selectable commit, or clear if they already are."""
        selectable = [c.id for c in source.commits if c.is_selectable]
        if selectable and len(self._ids) == len(selectable) and all(i in self._ids for i in selectable):
            self.clear()
        else:
            self._ids = dict.fromkeys(selectable)

    def prune(self, source: Repository) -> None:
        """Drop ids that are gone or no longer selectable."""
        keep = {c.id for c in source.commits if c.is_selectable}
        self._ids = {i: None for i in self._ids if i in keep}

    def clear(self) -> None:
        self._ids = {}


class CherryPickSession:
    def __init__(
        self,
        coordinator: AnalysisCoordinator,
        orchestrator: ExecutionOrchestrator,
        provider: Optional[RepositoryProvider] = None,
        log_callback: Optional[LogCallback] = None,
    ):
        self.coordinator = coordinator
        self.orchestrator = orchestrator
        self.provider = provider
        self.log_callback = log_callback
        self.source: Optional[Repository] = None
        self.target: Optional[Repository] = None
        self.selection = SelectionState()
        self.log = ExecutionLog()
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, backend: Optional[BackendClient] = None) -> "CherryPickSession":
        backend = backend or BackendClient()
        return cls(
            coordinator=AnalysisCoordinator.from_settings(backend),
            orchestrator=ExecutionOrchestrator(backend),
            provider=RepositoryProvider.from_settings(backend),
        )

    @property
    def is_loaded(self) -> bool:
        return self.source is not None and self.target is not None

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    def _record(self, line: str) -> None:
        self.log.append(line)
        if self.log_callback:
            self.log_callback(line)

    def set_repositories(self, source: Repository, target: Repository) -> None:
        self.source = source
        self.target = target
        self.selection.prune(source)

    async def load(self) -> None:
        if self.provider is None:
            raise RuntimeError("Session has no repository provider")
        async with self._lock:
            pair = await self.provider.fetch()
            self.set_repositories(pair.source, pair.target)

    def toggle(self, commit_id: str) -> bool:
        if self.source is None:
            return False
        return self.selection.toggle(self.source, commit_id)

    def select_all(self) -> None:
        if self.source is not None:
            self.selection.select_all(self.source)

    async def analyze(self) -> Optional[AnalysisResult]:
        """Rescan the source against the target; no-op without repositories."""
        async with self._lock:
            if not self.is_loaded:
                return None
            result = await self.coordinator.analyze(self.source, self.target)
            self.set_repositories(self.source.with_commits(result.commits), self.target)
            self._record(f"Analysis complete via {result.tier}: scan finished.")
            return result

    def has_unselectable(self, commit_ids: Sequence[str]) -> bool:
        """Whether any known id refers to a picked or conflicting commit."""
        if self.source is None:
            return False
        for commit_id in commit_ids:
            commit = self.source.get_commit(commit_id)
            if commit is not None and not commit.is_selectable:
                return True
        return False

    async def execute(
        self,
        commit_ids: Optional[Sequence[str]] = None,
        target_repository_id: Optional[str] = None,
    ) -> Optional[ExecutionResult]:
        """Run one batch over the selection (or the given ids).

        Returns None when the preconditions do not hold, including any id
        naming a commit that is no longer selectable.
        """
        async with self._lock:
            if not self.is_loaded:
                return None
            ids = list(commit_ids) if commit_ids is not None else self.selection.ids
            if not ids:
                return None
            if target_repository_id is not None and target_repository_id != self.target.id:
                return None
            if self.has_unselectable(ids):
                return None

            self.log.reset()
            outcome = await self.orchestrator.execute(ids, self.source, self.target, self._record)
            self.set_repositories(outcome.source, outcome.target)
            # Explicit ids leave the rest of the selection alone; applied ones are pruned above
            if outcome.success and commit_ids is None:
                self.selection.clear()
            return outcome.to_result()
