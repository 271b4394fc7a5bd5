# backend/opatlas/auth/schemas.py

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from opatlas.playbooks.schemas import AuthorRef
from opatlas.runs.schemas import UserRef


class WorkspaceRole(str, Enum):
    """
    ワークスペース内の権限。

    - OWNER / EDITOR: Playbook と Run を変更できる
    - VIEWER: 参照のみ
    """

    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"


class CurrentUser(BaseModel):
    """リクエストしたユーザーの情報（認証基盤から受け取る想定）。"""

    id: str
    name: str
    email: Optional[str] = None
    role: WorkspaceRole

    def can_edit(self) -> bool:
        return self.role in (WorkspaceRole.OWNER, WorkspaceRole.EDITOR)

    def as_user_ref(self) -> UserRef:
        return UserRef(id=self.id, name=self.name)

    def as_author(self) -> AuthorRef:
        return AuthorRef(id=self.id, name=self.name, email=self.email)
