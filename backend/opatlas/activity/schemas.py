# backend/opatlas/activity/schemas.py

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ActivityType(str, Enum):
    PLAYBOOK_CREATED = "playbook_created"
    RUN_STARTED = "run_started"
    RUN_ASSIGNED = "run_assigned"
    COMMENT_ADDED = "comment_added"
    RUN_COMPLETED = "run_completed"


class ActivityEvent(BaseModel):
    """
    アクティビティフィード 1件分。

    Run 系のイベントは Run が持つタイトルのスナップショットを表示に使う。
    """

    id: str
    type: ActivityType
    user_name: str = Field(..., description="操作したユーザーの表示名")
    playbook_id: str
    playbook_title: str
    run_id: Optional[str] = None
    timestamp: datetime
    details: Optional[str] = Field(None, description="担当者名やコメント本文など")
