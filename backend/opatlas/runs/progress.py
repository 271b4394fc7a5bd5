# backend/opatlas/runs/progress.py

"""
Run の進捗率と完了処理。
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from opatlas.utils.dates import ensure_utc
from opatlas.utils.numbers import round_half_up

from .checklist import checkbox_ids
from .schemas import ChecklistItem, PlaybookRun, RunStatus


def normalize_now(now: Optional[datetime]) -> datetime:
    """
    naive な datetime が渡された場合でも UTC として扱うヘルパー。
    """
    if now is None:
        return datetime.now(timezone.utc)
    return ensure_utc(now)


def compute_progress(checklist: Iterable[ChecklistItem], checked_step_ids: Iterable[str]) -> int:
    """
    チェック済みステップ数 / 全ステップ数 を 0〜100 の整数で返す。

    見出しや、チェックリストに存在しない ID は数えない。ステップが 0 件なら 0。
    """
    steps = checkbox_ids(checklist)
    if not steps:
        return 0
    checked = set(checked_step_ids)
    done = sum(1 for step_id in steps if step_id in checked)
    return round_half_up(100 * done / len(steps))


def complete_run(run: PlaybookRun, *, now: Optional[datetime] = None) -> PlaybookRun:
    """
    Run を completed にする。

    completed_at / duration_ms は初回の完了時にだけ設定し、
    再度呼ばれても（一度 in-progress に戻された後でも）再計算しない。
    """
    if run.completed_at is not None:
        if run.status == RunStatus.COMPLETED:
            return run
        return run.model_copy(update={"status": RunStatus.COMPLETED, "progress": 100})

    completed_at = normalize_now(now)
    elapsed_ms = (completed_at - run.started_at) // timedelta(milliseconds=1)

    return run.model_copy(
        update={
            "status": RunStatus.COMPLETED,
            "completed_at": completed_at,
            # 時計のずれで負になる場合は 0 に丸める
            "duration_ms": max(0, elapsed_ms),
            "progress": 100,
        }
    )


def format_duration(duration_ms: Optional[int]) -> str:
    """
    所要時間を "2d 3h" / "1h 5m" / "12m" / "40s" の形式にする。未記録なら "N/A"。
    """
    if not duration_ms:
        return "N/A"

    seconds = duration_ms // 1000
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{seconds}s"
