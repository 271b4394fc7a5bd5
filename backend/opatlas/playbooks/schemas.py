# backend/opatlas/playbooks/schemas.py

"""
Playbook 関連の Pydantic スキーマ定義。

- Playbook: ストアに保持されるレコード本体
- PlaybookCreate / PlaybookUpdate: API からの入力
- TagSummary: タグ一覧用の集計結果
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from opatlas.utils.dates import ensure_utc


class AuthorRef(BaseModel):
    """
    作成者のスナップショット。

    作成時点の id / name / email をコピーして持つだけで、
    ユーザー情報が後から変わっても追従しない。
    """

    id: str = Field(..., description="ユーザー ID")
    name: str = Field(..., description="表示名")
    email: Optional[str] = Field(None, description="メールアドレス")


class Playbook(BaseModel):
    """
    Markdown で書かれた運用手順書 1件分。
    """

    id: str = Field(..., description="ストアが払い出す ID")
    workspace_id: str = Field(..., description="所属ワークスペース ID")
    title: str = Field(..., description="タイトル（空文字不可）")
    description: str = Field("", description="概要（任意）")
    content_md: str = Field(..., description="本文（Markdown）")
    tags: List[str] = Field(
        default_factory=list,
        description="タグ。重複なし、登録順を保持する。",
    )
    triggers: List[str] = Field(
        default_factory=list,
        description="この Playbook を使うべき状況の説明文の配列",
    )
    related_playbooks: List[str] = Field(
        default_factory=list,
        description="関連 Playbook の ID。存在チェックや循環チェックは行わない弱い参照。",
    )
    usage_count: int = Field(0, ge=0, description="Run が開始された回数")
    author: AuthorRef = Field(..., description="作成者のスナップショット")
    created_at: datetime = Field(..., description="作成時刻（UTC）")
    updated_at: datetime = Field(..., description="最終更新時刻（UTC）")

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, value: datetime) -> datetime:
        # オフセット無しの時刻は UTC とみなす
        return ensure_utc(value)


class PlaybookCreate(BaseModel):
    """
    POST /playbooks のリクエストボディ。

    必須チェック（workspace_id / title / content_md）はストア側で行い、
    欠けている場合は ValidationError（400）にする。
    """

    workspace_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    content_md: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    triggers: List[str] = Field(default_factory=list)
    related_playbooks: List[str] = Field(default_factory=list)


class PlaybookUpdate(BaseModel):
    """
    PATCH /playbooks/{id} のリクエストボディ。

    None（未指定）のフィールドは「変更なし」を意味し、クリアはしない。
    """

    title: Optional[str] = None
    description: Optional[str] = None
    content_md: Optional[str] = None
    tags: Optional[List[str]] = None
    triggers: Optional[List[str]] = None
    related_playbooks: Optional[List[str]] = None


class TagSummary(BaseModel):
    """ワークスペース内のタグ 1件分の集計。"""

    name: str
    playbook_count: int
    playbook_ids: List[str]
