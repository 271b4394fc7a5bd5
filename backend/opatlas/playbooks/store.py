# backend/opatlas/playbooks/store.py

"""
Playbook レコードのストア。
"""

import logging
from datetime import datetime
from typing import List, Optional

from opatlas.storage.errors import NotFoundError
from opatlas.storage.memory import InMemoryStore, require_fields, unique_in_order

from .schemas import AuthorRef, Playbook, PlaybookCreate, PlaybookUpdate

logger = logging.getLogger(__name__)

# PATCH でそのまま差し替えるフィールド
_REPLACEABLE_FIELDS = ("title", "description", "content_md", "triggers", "related_playbooks")


class PlaybookStore(InMemoryStore[Playbook]):
    """
    Playbook の作成・取得・一覧・部分更新・削除を提供する。

    一覧は登録順で返す（並び替えはしない）。
    """

    kind = "playbook"

    def create(self, data: PlaybookCreate, *, author: AuthorRef) -> Playbook:
        require_fields(
            {
                "workspace_id": data.workspace_id,
                "title": data.title,
                "content_md": data.content_md,
            }
        )
        now = self._now()

        def build(record_id: str) -> Playbook:
            return Playbook(
                id=record_id,
                workspace_id=str(data.workspace_id),
                title=data.title,
                description=data.description or "",
                content_md=data.content_md,
                tags=unique_in_order(data.tags),
                triggers=list(data.triggers),
                related_playbooks=list(data.related_playbooks),
                usage_count=0,
                author=author,
                created_at=now,
                updated_at=now,
            )

        playbook = self._insert(build)
        logger.info(
            "Created playbook. id=%s workspace_id=%s total=%s",
            playbook.id,
            playbook.workspace_id,
            len(self),
        )
        return playbook

    def list(self, workspace_id: str) -> List[Playbook]:
        return self._select(workspace_id)

    def update(self, playbook_id: str, patch: PlaybookUpdate) -> Playbook:
        """
        指定されたフィールドだけを差し替える。

        title / content_md を空にする更新は ValidationError とし、何も反映しない。
        """

        def apply(playbook: Playbook, now: datetime) -> Playbook:
            for name in _REPLACEABLE_FIELDS:
                value = getattr(patch, name)
                if value is not None:
                    setattr(playbook, name, value)
            if patch.tags is not None:
                playbook.tags = unique_in_order(patch.tags)

            require_fields({"title": playbook.title, "content_md": playbook.content_md})
            playbook.updated_at = now
            return playbook

        updated = self._mutate(playbook_id, apply)
        logger.info("Updated playbook. id=%s", playbook_id)
        return updated

    def increment_usage(self, playbook_id: str) -> Playbook:
        def apply(playbook: Playbook, now: datetime) -> Playbook:
            playbook.usage_count += 1
            return playbook

        return self._mutate(playbook_id, apply)

    def delete(self, playbook_id: str) -> None:
        super().delete(playbook_id)
        logger.info("Deleted playbook. id=%s", playbook_id)

    def find(self, playbook_id: str) -> Optional[Playbook]:
        """弱い参照の解決用。存在しなければ None を返す。"""
        try:
            return self.get(playbook_id)
        except NotFoundError:
            return None
