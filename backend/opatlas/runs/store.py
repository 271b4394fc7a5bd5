# backend/opatlas/runs/store.py

"""
Playbook Run レコードのストア。

更新系はすべてレコード単位のロック内で行うので、
同じ Run に対する checked_steps の更新とコメント追記が同時に来ても、
どちらかの結果が上書きで失われることはない。
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from opatlas.storage.errors import ValidationError
from opatlas.storage.memory import InMemoryStore, require_fields

from .checklist import checkbox_ids
from .progress import complete_run, compute_progress
from .schemas import (
    ChecklistItem,
    PlaybookRun,
    RunComment,
    RunCreate,
    RunStatus,
    RunStatusFilter,
    RunUpdate,
    UserRef,
)

logger = logging.getLogger(__name__)

_STATUS_FILTERS = {
    RunStatusFilter.ACTIVE: RunStatus.IN_PROGRESS,
    RunStatusFilter.COMPLETED: RunStatus.COMPLETED,
}


def _new_comment_id() -> str:
    return f"comment-{uuid.uuid4().hex[:12]}"


class RunStore(InMemoryStore[PlaybookRun]):
    """
    Run の作成・取得・一覧・部分更新・削除を提供する。

    一覧は started_at の新しい順。
    """

    kind = "run"

    def create(self, data: RunCreate, *, started_by: UserRef) -> PlaybookRun:
        require_fields(
            {
                "workspace_id": data.workspace_id,
                "playbook_id": data.playbook_id,
                "playbook_title": data.playbook_title,
            }
        )
        now = self._now()

        def build(record_id: str) -> PlaybookRun:
            return PlaybookRun(
                id=record_id,
                workspace_id=str(data.workspace_id),
                playbook_id=str(data.playbook_id),
                playbook_title=data.playbook_title,
                status=RunStatus.IN_PROGRESS,
                started_at=now,
                started_by=started_by,
                assigned_to=data.assigned_to,
                updated_at=now,
            )

        run = self._insert(build)
        logger.info(
            "Created run. id=%s playbook_id=%s assigned_to=%s total=%s",
            run.id,
            run.playbook_id,
            run.assigned_to.name if run.assigned_to else "unassigned",
            len(self),
        )
        return run

    def list(
        self,
        workspace_id: str,
        status: RunStatusFilter = RunStatusFilter.ALL,
    ) -> List[PlaybookRun]:
        runs = self._select(workspace_id)

        wanted = _STATUS_FILTERS.get(status)
        if wanted is not None:
            runs = [run for run in runs if run.status == wanted]

        runs.sort(key=lambda run: run.started_at, reverse=True)
        return runs

    def update(
        self,
        run_id: str,
        patch: RunUpdate,
        *,
        actor: Optional[UserRef] = None,
    ) -> PlaybookRun:
        """
        PATCH の内容を反映する。

        :param actor: コメントの投稿者。patch.comment がある場合は必須。
        """
        updated, _ = self.update_with_outcome(run_id, patch, actor=actor)
        return updated

    def update_with_outcome(
        self,
        run_id: str,
        patch: RunUpdate,
        *,
        actor: Optional[UserRef] = None,
    ) -> Tuple[PlaybookRun, bool]:
        """
        update と同じ処理を行い、(更新後の Run, この呼び出しで初めて完了したか) を返す。

        完了の判定はレコードのロック内で行うので、同時に completed が送られても
        True になるのはどれか 1つの呼び出しだけ。
        """
        newly_completed = False

        def apply(run: PlaybookRun, now: datetime) -> PlaybookRun:
            nonlocal newly_completed
            was_completed = run.completed_at is not None

            if patch.status is not None:
                if patch.status == RunStatus.COMPLETED:
                    run = complete_run(run, now=now)
                else:
                    run.status = patch.status

            if patch.checked_steps is not None:
                run.checked_steps = list(patch.checked_steps)

            if patch.step_notes is not None:
                run.step_notes = {**run.step_notes, **patch.step_notes}

            if patch.notes is not None:
                run.notes = patch.notes

            if patch.progress is not None:
                run.progress = patch.progress

            if patch.assigned_to is not None:
                run.assigned_to = patch.assigned_to

            if patch.comment is not None:
                comment = self._build_comment(
                    patch.comment.step_id,
                    patch.comment.text,
                    actor,
                    now,
                )
                run.comments.append(comment)

            newly_completed = not was_completed and run.completed_at is not None
            run.updated_at = now
            return run

        updated = self._mutate(run_id, apply)
        logger.info(
            "Updated run. id=%s status=%s progress=%s",
            updated.id,
            updated.status.value,
            updated.progress,
        )
        return updated, newly_completed

    def toggle_step(
        self,
        run_id: str,
        step_id: str,
        checklist: Sequence[ChecklistItem],
    ) -> PlaybookRun:
        """
        ステップのチェック状態を反転し、同じ排他区間で progress を再計算する。
        """
        if step_id not in checkbox_ids(checklist):
            raise ValidationError(f"Unknown step id: {step_id}", fields=["step_id"])

        def apply(run: PlaybookRun, now: datetime) -> PlaybookRun:
            if step_id in run.checked_steps:
                run.checked_steps = [s for s in run.checked_steps if s != step_id]
            else:
                run.checked_steps = [*run.checked_steps, step_id]
            run.progress = compute_progress(checklist, run.checked_steps)
            run.updated_at = now
            return run

        updated = self._mutate(run_id, apply)
        logger.info("Toggled step. id=%s step_id=%s progress=%s", run_id, step_id, updated.progress)
        return updated

    def delete(self, run_id: str) -> None:
        super().delete(run_id)
        logger.info("Deleted run. id=%s", run_id)

    @staticmethod
    def _build_comment(
        step_id: Optional[str],
        text: str,
        actor: Optional[UserRef],
        now: datetime,
    ) -> RunComment:
        if actor is None:
            raise ValidationError("Comment requires an author.", fields=["comment.author"])
        body = (text or "").strip()
        if not body:
            raise ValidationError("Comment text must not be empty.", fields=["comment.text"])

        return RunComment(
            id=_new_comment_id(),
            step_id=step_id,
            author_id=actor.id,
            author_name=actor.name,
            text=body,
            created_at=now,
        )
