"""
Where the source and target repositories come from.

Tiers, in order: remote backend, local git checkouts, built-in demo data.
"""
import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from cherrypick.core.config import settings
from cherrypick.models import Commit, Repository, RepositoryPair, RepoRole
from cherrypick.services import git_ops
from cherrypick.services.backend_client import BackendClient
from cherrypick.services.demo_data import demo_repositories
from cherrypick.services.fallback import FallbackChain, FallbackTier, TierFailure

logger = logging.getLogger(__name__)


class GitLoadError(TierFailure):
    """A local checkout could not be read"""


def load_git_repository(repo_path: str, role: RepoRole, limit: int = 50) -> Repository:
    path = Path(repo_path).resolve()
    try:
        rows = git_ops.list_commits(str(path), limit=limit)
    except (subprocess.CalledProcessError, OSError) as e:
        raise GitLoadError(f"Cannot read git history at {path}: {e}")

    commits = [
        Commit(
            id=row["commit_sha"],
            hash=row["commit_sha"],
            author=row["author"],
            date=row["date"],
            message=row["message"],
            files_changed=row["files_changed"],
            origin_repository=path.name,
        )
        for row in rows
    ]
    return Repository(
        id=f"repo-{role.value}",
        name=path.name,
        url=git_ops.get_remote_url(str(path)),
        branch=git_ops.get_current_branch(str(path)),
        commits=commits,
    )


class BackendRepositories(FallbackTier[RepositoryPair]):
    name = "backend"

    def __init__(self, client: BackendClient):
        self.client = client

    async def attempt(self) -> RepositoryPair:
        return await self.client.get_repositories()


class GitRepositories(FallbackTier[RepositoryPair]):
    name = "git"

    def __init__(self, source_path: str, target_path: str, limit: int = 50):
        self.source_path = source_path
        self.target_path = target_path
        self.limit = limit

    async def attempt(self) -> RepositoryPair:
        return RepositoryPair(
            source=load_git_repository(self.source_path, RepoRole.SOURCE, self.limit),
            target=load_git_repository(self.target_path, RepoRole.TARGET, self.limit),
        )


class DemoRepositories(FallbackTier[RepositoryPair]):
    name = "demo"

    async def attempt(self) -> RepositoryPair:
        return demo_repositories()


class RepositoryProvider:
    def __init__(
        self,
        backend: Optional[BackendClient] = None,
        source_path: Optional[str] = None,
        target_path: Optional[str] = None,
        limit: Optional[int] = None,
    ):
        tiers: List[FallbackTier[RepositoryPair]] = []
        if backend is not None:
            tiers.append(BackendRepositories(backend))
        if source_path and target_path:
            tiers.append(GitRepositories(source_path, target_path, limit or settings.commit_limit))
        tiers.append(DemoRepositories())
        self.chain = FallbackChain("repositories", tiers)

    @classmethod
    def from_settings(cls, backend: Optional[BackendClient] = None) -> "RepositoryProvider":
        return cls(
            backend=backend,
            source_path=settings.source_repo_path,
            target_path=settings.target_repo_path,
        )

    async def fetch(self) -> RepositoryPair:
        _, pair = await self.chain.run()
        return pair
