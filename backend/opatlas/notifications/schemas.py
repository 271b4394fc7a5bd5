# backend/opatlas/notifications/schemas.py

"""
通知メッセージの共通スキーマ定義。

- 通知の種別（メンション / 担当割り当て / 完了）
- 宛先ユーザー
- タイトル＋本文＋リンク

※ 本文にはコメントやメモの全文は含めず、Playbook タイトル程度に留めること。
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """
    通知の種別。

    - MENTION: コメントでメンションされた
    - ASSIGNMENT: Run の担当者に割り当てられた
    - COMPLETION: 自分が開始した Run が完了した
    """

    MENTION = "mention"
    ASSIGNMENT = "assignment"
    COMPLETION = "completion"


class NotificationMessage(BaseModel):
    """
    通知 1件分の情報。

    body はプレーンテキスト想定。
    """

    id: str = Field(
        default_factory=lambda: f"notification-{uuid.uuid4().hex[:12]}",
        description="通知 ID",
    )
    type: NotificationType = Field(..., description="通知の種別")
    recipient_id: str = Field(..., description="宛先ユーザー ID")
    workspace_id: Optional[str] = Field(None, description="関連するワークスペース ID")
    title: str = Field(..., description="短いタイトル（一覧の1行目など）。")
    body: str = Field(..., description="本文。プレーンテキスト想定。")
    link: Optional[str] = Field(None, description="関連画面へのパス（例: /app/runs/1）")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="通知生成時刻（UTC）。",
    )
    read: bool = Field(False, description="既読かどうか")


class NotificationListResponse(BaseModel):
    """GET /notifications のレスポンス。"""

    items: list[NotificationMessage]
    unread_count: int


class MarkAllReadResponse(BaseModel):
    """POST /notifications/read-all のレスポンス。"""

    updated: int
