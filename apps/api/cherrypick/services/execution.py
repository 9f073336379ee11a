"""
Cherry-pick batch execution.

A batch tries the remote backend once and otherwise simulates each pick
locally. Local progress is written into the batch as it happens, so a batch
that aborts midway still reports the commits it already applied.
"""
import asyncio
import logging
import uuid
from typing import Callable, List, Optional, Sequence

from cherrypick.core.config import settings
from cherrypick.models import Commit, ExecutionOutcome, ExecutionResult, Repository
from cherrypick.services.backend_client import BackendClient
from cherrypick.services.fallback import FallbackChain, FallbackExhausted, FallbackTier, TierFailure

logger = logging.getLogger(__name__)

LogCallback = Callable[[str], None]

START_LINE = "Requesting cherry-pick from backend..."
LOCAL_BATCH_START_LINE = "Starting local cherry-pick batch..."
LOCAL_START_LINE = "Running local git simulator..."
COMPLETION_LINE = "Clean: all operations finished."
REMOTE_FAILURE_LINE = "Backend reported a failed cherry-pick batch."


class SimulationError(TierFailure):
    """Local simulation aborted on a commit"""
    def __init__(self, message: str, commit_id: str):
        self.commit_id = commit_id
        super().__init__(message)


class Batch:
    """Mutable working state of one batch"""

    def __init__(
        self,
        commit_ids: Sequence[str],
        source: Repository,
        target: Repository,
        log_callback: Optional[LogCallback] = None,
    ):
        self.commit_ids = list(commit_ids)
        self.source = source
        self.target = target
        self.logs: List[str] = []
        self.log_callback = log_callback

    def record(self, line: str) -> None:
        self.logs.append(line)
        if self.log_callback:
            self.log_callback(line)

    def apply(self, commit: Commit) -> Commit:
        """Mark commit picked in source and prepend an independent copy to target."""
        copy = commit.as_picked(
            id=f"{commit.id}-{uuid.uuid4().hex[:8]}",
            origin_repository=commit.origin_repository or self.source.name,
        )
        self.source = self.source.mark_picked([commit.id])
        self.target = self.target.prepend(copy)
        return copy

    def outcome(self, success: bool, tier: Optional[str]) -> ExecutionOutcome:
        return ExecutionOutcome(
            success=success,
            logs=list(self.logs),
            tier=tier,
            source=self.source,
            target=self.target,
        )


class RemoteExecution(FallbackTier[ExecutionResult]):
    name = "backend"

    def __init__(self, client: BackendClient):
        self.client = client

    async def attempt(self, batch: Batch) -> ExecutionResult:
        result = await self.client.cherry_pick(batch.commit_ids, batch.target.id)
        for line in result.logs:
            batch.record(line)
        if result.success:
            await self._refresh(batch)
        return result

    async def _refresh(self, batch: Batch) -> None:
        try:
            pair = await self.client.get_repositories()
        except TierFailure as e:
            # Keep the invariant that applied commits are not selectable again
            logger.warning(f"Could not refresh repositories after remote batch: {e.message}")
            batch.source = batch.source.mark_picked(batch.commit_ids)
            return
        batch.source, batch.target = pair.source, pair.target


class LocalSimulation(FallbackTier[ExecutionResult]):
    name = "local"

    def __init__(self, delay: Optional[float] = None):
        self.delay = delay if delay is not None else settings.simulation_delay

    async def attempt(self, batch: Batch) -> ExecutionResult:
        batch.record(LOCAL_START_LINE)
        for commit_id in batch.commit_ids:
            try:
                commit = batch.source.get_commit(commit_id)
                if commit is None:
                    raise LookupError(f"commit {commit_id} is not in {batch.source.name}")
                batch.record(f"Cherry-picking {commit.short_hash}: {commit.message}")
                await asyncio.sleep(self.delay)
                batch.record(f"Successfully picked {commit.short_hash} (simulated)")
                batch.apply(commit)
            except Exception as e:
                raise SimulationError(f"Local simulation aborted on {commit_id}: {e}", commit_id) from e
        return ExecutionResult(success=True, logs=[])


class ExecutionOrchestrator:
    """Runs batches through the backend and local simulation tiers.

    With ``framed=False`` the batch start and completion lines are left out.
    The backend service uses that mode, since its logs are embedded in a
    client batch that frames them itself.
    """

    def __init__(
        self,
        backend: Optional[BackendClient] = None,
        delay: Optional[float] = None,
        framed: bool = True,
    ):
        tiers: List[FallbackTier[ExecutionResult]] = []
        if backend is not None:
            tiers.append(RemoteExecution(backend))
        tiers.append(LocalSimulation(delay))
        self.chain = FallbackChain("execution", tiers)
        self.framed = framed
        self.start_line = START_LINE if backend is not None else LOCAL_BATCH_START_LINE

    async def execute(
        self,
        commit_ids: Sequence[str],
        source: Repository,
        target: Repository,
        log_callback: Optional[LogCallback] = None,
    ) -> Optional[ExecutionOutcome]:
        """Run one batch; returns None when there is nothing to execute."""
        if not commit_ids:
            return None

        batch = Batch(commit_ids, source, target, log_callback)
        if self.framed:
            batch.record(self.start_line)

        try:
            tier, result = await self.chain.run(batch)
        except FallbackExhausted as e:
            logger.error(e.message)
            batch.record(f"CRITICAL: cherry-pick batch aborted. {e.last_error.message}")
            return batch.outcome(False, None)

        if not result.success:
            batch.record(REMOTE_FAILURE_LINE)
            return batch.outcome(False, tier)

        if self.framed:
            batch.record(COMPLETION_LINE)
        logger.info(f"Batch of {len(batch.commit_ids)} commits finished via {tier}")
        return batch.outcome(True, tier)
