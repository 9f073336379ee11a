from fastapi import APIRouter, Depends, HTTPException
from typing import List

from cherrypick.api.deps import get_coordinator, get_session
from cherrypick.models import AnalyzeRequest, Commit, RepositoryPair
from cherrypick.services.analysis import AnalysisCoordinator
from cherrypick.services.session import CherryPickSession

router = APIRouter(prefix="/api", tags=["repos"])


@router.get("/repos", response_model=RepositoryPair)
async def repositories(session: CherryPickSession = Depends(get_session)) -> RepositoryPair:
    if not session.is_loaded:
        raise HTTPException(status_code=503, detail="Repositories not loaded")
    return RepositoryPair(source=session.source, target=session.target)


@router.post("/analyze", response_model=List[Commit])
async def analyze(
    body: AnalyzeRequest,
    coordinator: AnalysisCoordinator = Depends(get_coordinator),
) -> List[Commit]:
    result = await coordinator.analyze(body.source, body.target)
    return result.commits
