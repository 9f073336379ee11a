from cherrypick.models.commit import Commit, CommitStatus
from cherrypick.models.repository import Repository, RepositoryPair, RepoRole
from cherrypick.models.execution import (
    AnalysisResult,
    AnalyzeRequest,
    CherryPickRequest,
    ExecutionOutcome,
    ExecutionResult,
)


__all__ = [
    "Commit",
    "CommitStatus",
    "Repository",
    "RepositoryPair",
    "RepoRole",
    "AnalysisResult",
    "AnalyzeRequest",
    "CherryPickRequest",
    "ExecutionOutcome",
    "ExecutionResult",
]
