from fastapi import APIRouter, HTTPException, Depends

from cherrypick.api.deps import get_session
from cherrypick.core.terminal_ui import ui
from cherrypick.models import CherryPickRequest, ExecutionResult
from cherrypick.services.session import CherryPickSession

router = APIRouter(prefix="/api", tags=["cherry-pick"])


@router.post("/cherry-pick", response_model=ExecutionResult)
async def cherry_pick(body: CherryPickRequest, session: CherryPickSession = Depends(get_session)) -> ExecutionResult:
    if not body.commit_ids:
        raise HTTPException(status_code=400, detail="No commits selected")
    if body.target_repository_id != session.target.id:
        raise HTTPException(status_code=404, detail="Target repository not found")
    if session.has_unselectable(body.commit_ids):
        raise HTTPException(status_code=409, detail="Picked or conflicting commits cannot be cherry-picked again")

    result = await session.execute(body.commit_ids, body.target_repository_id)
    if result is None:
        # Another batch changed the repositories while this one waited
        raise HTTPException(status_code=409, detail="Commits are no longer selectable")
    ui.batch_log(result.logs, result.success)
    return result
