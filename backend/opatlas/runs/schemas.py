# backend/opatlas/runs/schemas.py

"""
Playbook Run（実行記録）関連の Pydantic スキーマ定義。

- PlaybookRun: ストアに保持されるレコード本体
- RunCreate / RunUpdate / CommentCreate: API からの入力
- ChecklistItem / RunChecklist: Markdown 本文から導出するチェックリスト（保存しない）
- RunMetrics: ワークスペース単位の集計
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from opatlas.utils.dates import ensure_utc


class RunStatus(str, Enum):
    """Run の状態。"""

    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class RunStatusFilter(str, Enum):
    """
    一覧取得時の絞り込み。

    - ACTIVE: in-progress のみ
    - COMPLETED: completed のみ
    - ALL: 絞り込みなし（abandoned も含む）
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    ALL = "all"


class UserRef(BaseModel):
    """開始者・担当者のスナップショット（id と表示名のみ）。"""

    id: str
    name: str


class RunComment(BaseModel):
    """Run に追記されたコメント 1件。追記のみで編集・削除はしない。"""

    id: str
    step_id: Optional[str] = Field(None, description="対象ステップ ID（Run 全体へのコメントなら None）")
    author_id: str
    author_name: str
    text: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def normalize_timestamps(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class PlaybookRun(BaseModel):
    """
    Playbook 1回分の実行記録。

    playbook_title は開始時点のコピーで、Playbook 側の変更・削除には追従しない。
    progress は呼び出し側が計算して渡す値をそのまま保存するため、
    checked_steps と食い違う可能性がある点に注意。
    """

    id: str
    workspace_id: str
    playbook_id: str = Field(..., description="Playbook ID（弱い参照）")
    playbook_title: str = Field(..., description="開始時点の Playbook タイトル")
    status: RunStatus = RunStatus.IN_PROGRESS
    started_at: datetime
    completed_at: Optional[datetime] = Field(
        None,
        description="初めて completed になった時刻。一度だけ設定される。",
    )
    started_by: UserRef
    assigned_to: Optional[UserRef] = None
    checked_steps: List[str] = Field(default_factory=list)
    step_notes: Dict[str, str] = Field(
        default_factory=dict,
        description="ステップ ID -> メモ。更新時はマージされ、丸ごと置き換えられることはない。",
    )
    notes: str = ""
    comments: List[RunComment] = Field(default_factory=list)
    progress: int = Field(0, ge=0, le=100, description="進捗率（0〜100）")
    duration_ms: Optional[int] = Field(
        None,
        ge=0,
        description="完了までの所要時間（ミリ秒）。completed_at と同時に一度だけ設定される。",
    )
    updated_at: datetime

    @field_validator("started_at", "completed_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, value: Optional[datetime]) -> Optional[datetime]:
        # オフセット無しの時刻は UTC とみなす。complete_run や集計で aware な now と比較するため
        return ensure_utc(value)


class RunCreate(BaseModel):
    """
    POST /runs のリクエストボディ。

    started_by はリクエストしたユーザーから決めるので受け取らない。
    """

    workspace_id: Optional[str] = None
    playbook_id: Optional[str] = None
    playbook_title: Optional[str] = None
    assigned_to: Optional[UserRef] = None


class CommentCreate(BaseModel):
    """PATCH /runs/{id} で追加するコメント。"""

    step_id: Optional[str] = None
    text: str
    mentions: List[str] = Field(
        default_factory=list,
        description="メンションされたユーザー ID。通知の送信先になる。",
    )


class RunUpdate(BaseModel):
    """
    PATCH /runs/{id} のリクエストボディ。

    None（未指定）のフィールドは変更しない。
    - checked_steps / notes / progress / assigned_to: 上書き
    - step_notes: 既存のメモにマージ
    - comment: comments に追記
    - status: completed への遷移時に completed_at / duration_ms を一度だけ設定
    """

    status: Optional[RunStatus] = None
    checked_steps: Optional[List[str]] = None
    step_notes: Optional[Dict[str, str]] = None
    notes: Optional[str] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    assigned_to: Optional[UserRef] = None
    comment: Optional[CommentCreate] = None


class ChecklistItemKind(str, Enum):
    HEADING = "heading"
    CHECKBOX = "checkbox"


class ChecklistItem(BaseModel):
    """
    Markdown 本文から導出したチェックリストの 1要素。

    ID は出現順の連番から作るため、本文が変わると後続の ID がずれる。
    """

    id: str = Field(..., description="h-<n> または step-<n>")
    text: str
    kind: ChecklistItemKind
    level: Optional[int] = Field(None, ge=1, le=6, description="見出しレベル（heading のみ）")
    checked: bool = False


class RunChecklist(BaseModel):
    """GET /runs/{id}/checklist のレスポンス。"""

    run_id: str
    playbook_id: str
    items: List[ChecklistItem]
    total_steps: int
    checked_count: int
    progress: int = Field(..., ge=0, le=100, description="チェックリストから再計算した進捗率")


class RunSummary(BaseModel):
    """メトリクスに載せる直近 Run の要約。"""

    id: str
    playbook_title: str
    status: RunStatus
    duration_ms: Optional[int] = None
    duration_label: str
    completed_at: Optional[datetime] = None


class RunMetrics(BaseModel):
    """
    ワークスペース単位の Run 集計。
    """

    total_runs: int
    completed_runs: int
    active_runs: int
    completion_rate: float = Field(..., description="完了率（%）。Run が無ければ 0。")
    avg_duration_ms: Optional[float] = Field(
        None,
        description="所要時間が記録された完了 Run の平均（ミリ秒）",
    )
    runs_this_week: int
    runs_last_week: int
    recent_runs: List[RunSummary]
