# backend/opatlas/runs/metrics.py

"""
ワークスペースの Run 一覧からダッシュボード用の集計を作る。
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

from .progress import format_duration, normalize_now
from .schemas import PlaybookRun, RunMetrics, RunStatus, RunSummary

RECENT_RUNS_IN_METRICS = 5


def compute_run_metrics(
    runs: Sequence[PlaybookRun],
    *,
    now: Optional[datetime] = None,
) -> RunMetrics:
    """
    :param runs: started_at の新しい順に並んだ Run 一覧（RunStore.list の結果）
    """
    now = normalize_now(now)
    one_week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)

    completed = [run for run in runs if run.status == RunStatus.COMPLETED]
    active = [run for run in runs if run.status == RunStatus.IN_PROGRESS]

    durations = [run.duration_ms for run in completed if run.duration_ms is not None]
    avg_duration = sum(durations) / len(durations) if durations else None

    runs_this_week = sum(1 for run in runs if run.started_at > one_week_ago)
    runs_last_week = sum(
        1 for run in runs if two_weeks_ago < run.started_at <= one_week_ago
    )

    recent = [
        RunSummary(
            id=run.id,
            playbook_title=run.playbook_title,
            status=run.status,
            duration_ms=run.duration_ms,
            duration_label=format_duration(run.duration_ms),
            completed_at=run.completed_at,
        )
        for run in runs[:RECENT_RUNS_IN_METRICS]
    ]

    return RunMetrics(
        total_runs=len(runs),
        completed_runs=len(completed),
        active_runs=len(active),
        completion_rate=(len(completed) / len(runs) * 100) if runs else 0.0,
        avg_duration_ms=avg_duration,
        runs_this_week=runs_this_week,
        runs_last_week=runs_last_week,
        recent_runs=recent,
    )
