"""Repository model: a named commit history in the source or target role."""

from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from cherrypick.models.commit import Commit


class RepoRole(str, Enum):
    SOURCE = "source"
    TARGET = "target"


class Repository(BaseModel):
    """Commit history, most recent first."""

    id: str
    name: str
    url: str = ""
    branch: str = "main"
    commits: List[Commit] = []

    model_config = ConfigDict(frozen=True)

    def get_commit(self, commit_id: str) -> Optional[Commit]:
        for commit in self.commits:
            if commit.id == commit_id:
                return commit
        return None

    def with_commits(self, commits: Iterable[Commit]) -> "Repository":
        return self.model_copy(update={"commits": list(commits)})

    def mark_picked(self, commit_ids: Iterable[str]) -> "Repository":
        ids = set(commit_ids)
        return self.with_commits(
            c.as_picked() if c.id in ids else c for c in self.commits
        )

    def prepend(self, commit: Commit) -> "Repository":
        return self.with_commits([commit, *self.commits])


class RepositoryPair(BaseModel):
    """The two repositories a session works on."""

    source: Repository
    target: Repository
