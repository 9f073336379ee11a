"""Commit model shared by matching and execution."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CommitStatus(str, Enum):
    """Lifecycle state of a source commit."""

    READY = "ready"
    PENDING = "pending"
    PICKED = "picked"
    CONFLICT = "conflict"


class Commit(BaseModel):
    """Immutable snapshot of one version-control change."""

    id: str
    hash: str
    author: str
    date: str  # ISO-8601
    message: str
    files_changed: List[str] = Field(default_factory=list, alias="filesChanged")
    origin_repository: str = Field("", alias="sourceRepo")
    status: Optional[CommitStatus] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def effective_status(self) -> CommitStatus:
        """Status with absence treated as ready."""
        return self.status or CommitStatus.READY

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def is_selectable(self) -> bool:
        status = self.effective_status
        if status in (CommitStatus.READY, CommitStatus.PENDING):
            return True
        if status in (CommitStatus.PICKED, CommitStatus.CONFLICT):
            return False
        raise ValueError(f"Unhandled commit status: {status}")

    def as_picked(self, **update) -> "Commit":
        return self.model_copy(update={"status": CommitStatus.PICKED, **update})
