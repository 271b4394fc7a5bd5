# backend/opatlas/recommendations/__init__.py
"""
おすすめ Playbook のスコアリング。
"""

from .schemas import Recommendation  # noqa: F401
from .scorer import DEFAULT_WEIGHTS, ScoringWeights, score, score_playbook  # noqa: F401
