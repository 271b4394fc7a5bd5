# backend/opatlas/recommendations/scorer.py

"""
Playbook 推薦のスコアリング。

各要因を「(加点, 理由テキスト or None)」を返す小さな関数として定義し、
score_playbook はそれらを順に足し合わせるだけにしている。
重みは ScoringWeights にまとめてあり、要因ごとに差し替えてテストできる。

| 要因                 | 加点                                 | 理由テキスト                 |
|----------------------|--------------------------------------|------------------------------|
| 直近の利用回数       | per_recent_run × 回数                | 回数 > 0                     |
| 完了率               | completion_rate × 完了数 / 実行数    | 完了率 > 0.8                 |
| 作成からの日数       | 7日以内なら recently_created         | "Recently created"           |
| トリガー定義あり     | has_triggers                         | "Clear use-case defined"     |
| コンテキスト一致     | context_match                        | 一致したコンテキストを引用   |
| タグ数               | per_tag × タグ数                     | なし                         |
| 関連 Playbook あり   | has_related                          | "Part of workflow"           |

外部呼び出しは一切行わない純粋関数。
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from opatlas.playbooks.schemas import Playbook
from opatlas.runs.progress import normalize_now
from opatlas.runs.schemas import PlaybookRun, RunStatus
from opatlas.utils.numbers import round_half_up

from .schemas import Recommendation

DEFAULT_LIMIT = 5


@dataclass(frozen=True)
class ScoringWeights:
    """各要因の重みとしきい値。"""

    per_recent_run: float = 10.0
    completion_rate: float = 20.0
    recently_created: float = 15.0
    has_triggers: float = 10.0
    context_match: float = 50.0
    per_tag: float = 2.0
    has_related: float = 5.0
    recent_window: timedelta = timedelta(days=7)
    completion_reason_threshold: float = 0.8


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class FactorInput:
    """1つの Playbook を採点するときに各要因へ渡す材料。"""

    playbook: Playbook
    runs: Sequence[PlaybookRun]
    context_text: Optional[str]
    now: datetime
    weights: ScoringWeights


FactorResult = Tuple[float, Optional[str]]
Factor = Callable[[FactorInput], FactorResult]


def run_frequency(data: FactorInput) -> FactorResult:
    count = len(data.runs)
    if count == 0:
        return 0.0, None
    plural = "s" if count > 1 else ""
    return count * data.weights.per_recent_run, f"Used {count} time{plural} recently"


def completion_rate(data: FactorInput) -> FactorResult:
    if not data.runs:
        return 0.0, None
    completed = sum(1 for run in data.runs if run.status == RunStatus.COMPLETED)
    rate = completed / len(data.runs)
    reason = None
    if rate > data.weights.completion_reason_threshold:
        reason = f"{round_half_up(rate * 100)}% completion rate"
    return rate * data.weights.completion_rate, reason


def recently_created(data: FactorInput) -> FactorResult:
    if data.now - data.playbook.created_at < data.weights.recent_window:
        return data.weights.recently_created, "Recently created"
    return 0.0, None


def has_triggers(data: FactorInput) -> FactorResult:
    if data.playbook.triggers:
        return data.weights.has_triggers, "Clear use-case defined"
    return 0.0, None


def context_match(data: FactorInput) -> FactorResult:
    """
    コンテキストとトリガーのどちらかがもう一方を含んでいれば一致とみなす（大文字小文字は無視）。
    """
    context = (data.context_text or "").strip()
    if not context:
        return 0.0, None

    needle = context.lower()
    for trigger in data.playbook.triggers:
        candidate = trigger.strip().lower()
        # 空のトリガーはどんな文字列にも含まれてしまうので対象外
        if not candidate:
            continue
        if candidate in needle or needle in candidate:
            return data.weights.context_match, f'Matches "{context}"'
    return 0.0, None


def tag_richness(data: FactorInput) -> FactorResult:
    return len(data.playbook.tags) * data.weights.per_tag, None


def related_playbooks(data: FactorInput) -> FactorResult:
    if data.playbook.related_playbooks:
        return data.weights.has_related, "Part of workflow"
    return 0.0, None


FACTORS: Tuple[Factor, ...] = (
    run_frequency,
    completion_rate,
    recently_created,
    has_triggers,
    context_match,
    tag_richness,
    related_playbooks,
)


def score_playbook(
    playbook: Playbook,
    recent_runs: Sequence[PlaybookRun],
    context_text: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> Tuple[float, List[str]]:
    """
    1つの Playbook のスコアと理由を返す。

    recent_runs はワークスペースの直近 Run。ここでは playbook_id で絞り込むだけで、
    並び替えや件数制限はしない。
    """
    data = FactorInput(
        playbook=playbook,
        runs=[run for run in recent_runs if run.playbook_id == playbook.id],
        context_text=context_text,
        now=normalize_now(now),
        weights=weights,
    )

    total = 0.0
    reasons: List[str] = []
    for factor in FACTORS:
        points, reason = factor(data)
        total += points
        if reason:
            reasons.append(reason)
    return total, reasons


def score(
    playbooks: Sequence[Playbook],
    recent_runs: Sequence[PlaybookRun],
    context_text: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    limit: int = DEFAULT_LIMIT,
) -> List[Recommendation]:
    """
    スコアの高い順に最大 limit 件の推薦を返す。

    スコア 0 以下は除外。同点の場合は入力順を保つ（安定ソート）。
    """
    now = normalize_now(now)
    recommendations: List[Recommendation] = []

    for playbook in playbooks:
        total, reasons = score_playbook(
            playbook,
            recent_runs,
            context_text,
            now=now,
            weights=weights,
        )
        if total <= 0:
            continue
        recommendations.append(
            Recommendation(
                **playbook.model_dump(),
                recommendation_score=total,
                recommendation_reasons=reasons,
            )
        )

    recommendations.sort(key=lambda r: r.recommendation_score, reverse=True)
    return recommendations[: max(0, limit)]
