# backend/opatlas/runs/service.py

"""
Run まわりのサービス層。

責務:
- RunStore への作成・更新・削除の委譲
- Run 開始時の Playbook 利用回数カウント
- Playbook 本文からのチェックリスト導出と進捗計算
- 担当割り当て / メンション / 完了の通知
"""

import logging
from datetime import datetime
from typing import List, Optional

from opatlas.notifications.schemas import NotificationMessage, NotificationType
from opatlas.notifications.service import CompositeNotificationService
from opatlas.playbooks.store import PlaybookStore
from opatlas.storage.errors import NotFoundError

from .checklist import checkbox_ids, parse_checklist
from .metrics import compute_run_metrics
from .progress import compute_progress, format_duration
from .schemas import (
    PlaybookRun,
    RunChecklist,
    RunCreate,
    RunMetrics,
    RunStatus,
    RunStatusFilter,
    RunUpdate,
    UserRef,
)
from .store import RunStore

logger = logging.getLogger(__name__)


def _run_link(run: PlaybookRun) -> str:
    return f"/app/runs/{run.id}"


class RunService:
    """
    Run のユースケースをまとめたサービスクラス。

    - ストアと通知サービスはコンストラクタで注入する（テストではダミーを渡す）
    """

    def __init__(
        self,
        runs: RunStore,
        playbooks: PlaybookStore,
        notifications: CompositeNotificationService,
    ) -> None:
        self._runs = runs
        self._playbooks = playbooks
        self._notifications = notifications

    # ---- 公開 API ------------------------------------------------------

    def start_run(self, data: RunCreate, *, actor: UserRef) -> PlaybookRun:
        run = self._runs.create(data, started_by=actor)

        try:
            self._playbooks.increment_usage(run.playbook_id)
        except NotFoundError:
            # Playbook は弱い参照なので、削除済みでも Run の作成は成功させる
            logger.info("Playbook for run is missing. run_id=%s playbook_id=%s", run.id, run.playbook_id)

        if run.assigned_to is not None:
            self._notify_assignment(run, actor)
        return run

    def get_run(self, run_id: str) -> PlaybookRun:
        return self._runs.get(run_id)

    def list_runs(
        self,
        workspace_id: str,
        status: RunStatusFilter = RunStatusFilter.ALL,
    ) -> List[PlaybookRun]:
        return self._runs.list(workspace_id, status)

    def update_run(self, run_id: str, patch: RunUpdate, *, actor: UserRef) -> PlaybookRun:
        updated, newly_completed = self._runs.update_with_outcome(run_id, patch, actor=actor)

        if patch.assigned_to is not None:
            self._notify_assignment(updated, actor)
        if patch.comment is not None and patch.comment.mentions:
            self._notify_mentions(updated, actor, patch.comment.mentions, patch.comment.step_id)
        if newly_completed:
            self._notify_completion(updated)
        return updated

    def delete_run(self, run_id: str) -> None:
        self._runs.delete(run_id)

    def get_checklist(self, run_id: str) -> RunChecklist:
        run = self._runs.get(run_id)
        playbook = self._playbooks.get(run.playbook_id)

        items = parse_checklist(playbook.content_md, run.checked_steps)
        steps = checkbox_ids(items)
        checked = set(run.checked_steps)

        return RunChecklist(
            run_id=run.id,
            playbook_id=playbook.id,
            items=items,
            total_steps=len(steps),
            checked_count=sum(1 for step_id in steps if step_id in checked),
            progress=compute_progress(items, run.checked_steps),
        )

    def toggle_step(self, run_id: str, step_id: str) -> PlaybookRun:
        run = self._runs.get(run_id)
        playbook = self._playbooks.get(run.playbook_id)
        checklist = parse_checklist(playbook.content_md)
        return self._runs.toggle_step(run_id, step_id, checklist)

    def metrics(self, workspace_id: str, *, now: Optional[datetime] = None) -> RunMetrics:
        return compute_run_metrics(self._runs.list(workspace_id), now=now)

    # ---- 内部: 通知 -----------------------------------------------------

    def _notify_assignment(self, run: PlaybookRun, actor: UserRef) -> None:
        assignee = run.assigned_to
        if assignee is None or assignee.id == actor.id:
            return
        self._notifications.send(
            NotificationMessage(
                type=NotificationType.ASSIGNMENT,
                recipient_id=assignee.id,
                workspace_id=run.workspace_id,
                title="Run assigned to you",
                body=f'{actor.name} assigned you to run "{run.playbook_title}"',
                link=_run_link(run),
            )
        )

    def _notify_mentions(
        self,
        run: PlaybookRun,
        actor: UserRef,
        mentions: List[str],
        step_id: Optional[str],
    ) -> None:
        where = f" ({step_id})" if step_id else ""
        # 同じユーザーへの重複メンションは 1通にまとめる
        for user_id in dict.fromkeys(mentions):
            if user_id == actor.id:
                continue
            self._notifications.send(
                NotificationMessage(
                    type=NotificationType.MENTION,
                    recipient_id=user_id,
                    workspace_id=run.workspace_id,
                    title="You were mentioned",
                    body=f'{actor.name} mentioned you in a comment on "{run.playbook_title}"{where}',
                    link=_run_link(run),
                )
            )

    def _notify_completion(self, run: PlaybookRun) -> None:
        if run.status != RunStatus.COMPLETED:
            return
        self._notifications.send(
            NotificationMessage(
                type=NotificationType.COMPLETION,
                recipient_id=run.started_by.id,
                workspace_id=run.workspace_id,
                title="Run completed",
                body=f'"{run.playbook_title}" was completed in {format_duration(run.duration_ms)}',
                link=_run_link(run),
            )
        )
