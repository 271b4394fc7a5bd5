# backend/opatlas/recommendations/schemas.py

from typing import List

from pydantic import Field

from opatlas.playbooks.schemas import Playbook


class Recommendation(Playbook):
    """
    スコアと理由を付けた Playbook。

    1リクエストの間だけ有効な導出データで、保存はしない。
    """

    recommendation_score: float = Field(..., description="各要因の加点の合計")
    recommendation_reasons: List[str] = Field(
        default_factory=list,
        description="人向けの推薦理由（加点順）",
    )
