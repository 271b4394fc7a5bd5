# backend/opatlas/activity/service.py

"""
Playbook と Run のスナップショットからアクティビティフィードを組み立てる。

イベントは保存せず、毎回レコードの内容から導出する。
"""

from typing import List, Sequence

from opatlas.playbooks.schemas import Playbook
from opatlas.runs.schemas import PlaybookRun, RunStatus

from .schemas import ActivityEvent, ActivityType

DEFAULT_ACTIVITY_LIMIT = 10


def _run_events(run: PlaybookRun) -> List[ActivityEvent]:
    events = [
        ActivityEvent(
            id=f"{run.id}-started",
            type=ActivityType.RUN_STARTED,
            user_name=run.started_by.name,
            playbook_id=run.playbook_id,
            playbook_title=run.playbook_title,
            run_id=run.id,
            timestamp=run.started_at,
        )
    ]

    if run.assigned_to is not None:
        # 割り当て時刻は記録していないので開始時刻で代用する
        events.append(
            ActivityEvent(
                id=f"{run.id}-assigned",
                type=ActivityType.RUN_ASSIGNED,
                user_name=run.started_by.name,
                playbook_id=run.playbook_id,
                playbook_title=run.playbook_title,
                run_id=run.id,
                timestamp=run.started_at,
                details=run.assigned_to.name,
            )
        )

    for comment in run.comments:
        events.append(
            ActivityEvent(
                id=comment.id,
                type=ActivityType.COMMENT_ADDED,
                user_name=comment.author_name,
                playbook_id=run.playbook_id,
                playbook_title=run.playbook_title,
                run_id=run.id,
                timestamp=comment.created_at,
                details=comment.text,
            )
        )

    if run.status == RunStatus.COMPLETED:
        events.append(
            ActivityEvent(
                id=f"{run.id}-completed",
                type=ActivityType.RUN_COMPLETED,
                user_name=run.started_by.name,
                playbook_id=run.playbook_id,
                playbook_title=run.playbook_title,
                run_id=run.id,
                timestamp=run.completed_at or run.updated_at,
            )
        )

    return events


def build_activity_feed(
    playbooks: Sequence[Playbook],
    runs: Sequence[PlaybookRun],
    *,
    limit: int = DEFAULT_ACTIVITY_LIMIT,
) -> List[ActivityEvent]:
    """
    新しい順に最大 limit 件のイベントを返す。
    """
    events: List[ActivityEvent] = [
        ActivityEvent(
            id=f"playbook-{playbook.id}-created",
            type=ActivityType.PLAYBOOK_CREATED,
            user_name=playbook.author.name,
            playbook_id=playbook.id,
            playbook_title=playbook.title,
            timestamp=playbook.created_at,
        )
        for playbook in playbooks
    ]
    for run in runs:
        events.extend(_run_events(run))

    events.sort(key=lambda event: event.timestamp, reverse=True)
    return events[: max(0, limit)]
