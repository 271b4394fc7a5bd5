# backend/opatlas/activity/router.py

from typing import List

from fastapi import APIRouter, Depends, Query

from opatlas.auth.dependencies import get_current_user
from opatlas.auth.schemas import CurrentUser
from opatlas.state import AppState, get_app_state

from .schemas import ActivityEvent
from .service import DEFAULT_ACTIVITY_LIMIT, build_activity_feed

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("", response_model=List[ActivityEvent], summary="ワークスペースの最近のアクティビティ")
def get_activity(
    workspace_id: str = Query(..., description="ワークスペース ID"),
    limit: int = Query(DEFAULT_ACTIVITY_LIMIT, ge=1, le=100),
    state: AppState = Depends(get_app_state),
    _user: CurrentUser = Depends(get_current_user),
) -> List[ActivityEvent]:
    return build_activity_feed(
        state.playbooks.list(workspace_id),
        state.runs.list(workspace_id),
        limit=limit,
    )
