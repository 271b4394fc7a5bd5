# backend/opatlas/recommendations/service.py

"""
ストアのスナップショットを集めて scorer に渡すサービス層。

キャッシュは持たず、リクエストごとに毎回計算し直す。
"""

import logging
from datetime import datetime
from typing import List, Optional

from opatlas.playbooks.store import PlaybookStore
from opatlas.runs.store import RunStore

from .config import RecommendationSettings, get_recommendation_settings
from .schemas import Recommendation
from .scorer import score

logger = logging.getLogger(__name__)


class RecommendationService:
    """
    ワークスペースの Playbook と直近 Run から推薦を組み立てる。
    """

    def __init__(
        self,
        playbooks: PlaybookStore,
        runs: RunStore,
        *,
        settings: Optional[RecommendationSettings] = None,
    ) -> None:
        self._playbooks = playbooks
        self._runs = runs
        self._settings = settings or get_recommendation_settings()

    def recommend(
        self,
        workspace_id: str,
        context_text: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> List[Recommendation]:
        playbooks = self._playbooks.list(workspace_id)
        # RunStore.list は started_at の新しい順なので、先頭から切り出せば直近 N 件になる
        recent_runs = self._runs.list(workspace_id)[: self._settings.recent_runs_limit]

        recommendations = score(
            playbooks,
            recent_runs,
            context_text,
            now=now,
            limit=self._settings.max_results,
        )
        logger.debug(
            "Recommendations. workspace_id=%s results=%s",
            workspace_id,
            [(r.id, r.recommendation_score, r.recommendation_reasons) for r in recommendations],
        )
        return recommendations
