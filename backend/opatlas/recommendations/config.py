# backend/opatlas/recommendations/config.py

from dataclasses import dataclass
from functools import lru_cache

from opatlas.utils.config import get_env_int


@dataclass(frozen=True)
class RecommendationSettings:
    """
    推薦まわりの設定値。

    - recent_runs_limit: スコアリングに渡す直近 Run の件数
    - max_results: 返す推薦の最大件数
    """

    recent_runs_limit: int
    max_results: int


@lru_cache()
def get_recommendation_settings() -> RecommendationSettings:
    """
    任意:
      - OPATLAS_RECENT_RUNS_LIMIT   （デフォルト 20）
      - OPATLAS_MAX_RECOMMENDATIONS （デフォルト 5）
    """
    return RecommendationSettings(
        recent_runs_limit=get_env_int("OPATLAS_RECENT_RUNS_LIMIT", default=20),
        max_results=get_env_int("OPATLAS_MAX_RECOMMENDATIONS", default=5),
    )
