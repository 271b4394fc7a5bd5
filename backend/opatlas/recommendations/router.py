# backend/opatlas/recommendations/router.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from opatlas.auth.dependencies import get_current_user
from opatlas.auth.schemas import CurrentUser
from opatlas.state import get_recommendation_service

from .schemas import Recommendation
from .service import RecommendationService

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.get(
    "",
    response_model=List[Recommendation],
    summary="おすすめ Playbook",
    description=(
        "直近の利用状況・完了率・トリガー定義などからスコアを計算し、"
        "上位の Playbook を理由付きで返す。context を渡すとトリガーとの一致を加点する。"
    ),
)
def get_recommendations(
    workspace_id: str = Query(..., description="ワークスペース ID"),
    context: Optional[str] = Query(None, description="いま困っている状況などの自由記述"),
    service: RecommendationService = Depends(get_recommendation_service),
    _user: CurrentUser = Depends(get_current_user),
) -> List[Recommendation]:
    try:
        return service.recommend(workspace_id, context)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate recommendations.",
        ) from exc
