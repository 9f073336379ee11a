"""Request/response payloads for analysis and cherry-pick batches."""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from cherrypick.models.commit import Commit
from cherrypick.models.repository import Repository


class AnalyzeRequest(BaseModel):
    source: Repository
    target: Repository


class CherryPickRequest(BaseModel):
    commit_ids: List[str] = Field(alias="commitIds")
    target_repository_id: str = Field(
        alias="targetRepositoryId",
        validation_alias=AliasChoices("targetRepositoryId", "targetRepoId"),
    )

    model_config = ConfigDict(populate_by_name=True)


class ExecutionResult(BaseModel):
    """Outcome of one batch as exchanged with the backend."""

    success: bool
    logs: List[str] = []


class AnalysisResult(BaseModel):
    commits: List[Commit]
    tier: str


class ExecutionOutcome(BaseModel):
    """Batch result plus the repository snapshots it produced."""

    success: bool
    logs: List[str]
    tier: Optional[str] = None
    source: Repository
    target: Repository

    def to_result(self) -> ExecutionResult:
        return ExecutionResult(success=self.success, logs=self.logs)
