# backend/opatlas/runs/router.py

"""
Playbook Run 用の FastAPI ルーター定義。

- /runs, /runs/metrics
- /runs/{id}, /runs/{id}/checklist, /runs/{id}/steps/{step_id}/toggle
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from opatlas.auth.dependencies import get_current_user, require_editor
from opatlas.auth.schemas import CurrentUser
from opatlas.state import get_run_service
from opatlas.storage.errors import StoreError
from opatlas.utils.http import http_error

from .schemas import PlaybookRun, RunChecklist, RunCreate, RunMetrics, RunStatusFilter, RunUpdate
from .service import RunService

router = APIRouter(prefix="/runs", tags=["runs"])


@router.get("", response_model=List[PlaybookRun], summary="Run 一覧（新しい順）")
def list_runs(
    workspace_id: str = Query(..., description="ワークスペース ID"),
    status_filter: RunStatusFilter = Query(
        RunStatusFilter.ALL,
        alias="status",
        description="active / completed / all",
    ),
    service: RunService = Depends(get_run_service),
    _user: CurrentUser = Depends(get_current_user),
) -> List[PlaybookRun]:
    return service.list_runs(workspace_id, status_filter)


@router.post(
    "",
    response_model=PlaybookRun,
    status_code=status.HTTP_201_CREATED,
    summary="Run の開始",
)
def start_run(
    body: RunCreate,
    service: RunService = Depends(get_run_service),
    user: CurrentUser = Depends(require_editor),
) -> PlaybookRun:
    """
    - workspace_id / playbook_id / playbook_title が無い場合は 400
    - 開始者はリクエストユーザー
    """
    try:
        return service.start_run(body, actor=user.as_user_ref())
    except StoreError as exc:
        raise http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create run.",
        ) from exc


@router.get("/metrics", response_model=RunMetrics, summary="Run の集計")
def get_run_metrics(
    workspace_id: str = Query(..., description="ワークスペース ID"),
    service: RunService = Depends(get_run_service),
    _user: CurrentUser = Depends(get_current_user),
) -> RunMetrics:
    return service.metrics(workspace_id)


@router.get("/{run_id}", response_model=PlaybookRun, summary="Run の取得")
def get_run(
    run_id: str,
    service: RunService = Depends(get_run_service),
    _user: CurrentUser = Depends(get_current_user),
) -> PlaybookRun:
    try:
        return service.get_run(run_id)
    except StoreError as exc:
        raise http_error(exc) from exc


@router.patch("/{run_id}", response_model=PlaybookRun, summary="Run の部分更新")
def update_run(
    run_id: str,
    body: RunUpdate,
    service: RunService = Depends(get_run_service),
    user: CurrentUser = Depends(require_editor),
) -> PlaybookRun:
    """
    ステップのチェック・メモ・コメント・担当者・状態遷移をまとめて受け付ける。

    どれか 1つでも不正なら何も反映せずに 400 を返す。
    """
    try:
        return service.update_run(run_id, body, actor=user.as_user_ref())
    except StoreError as exc:
        raise http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update run.",
        ) from exc


@router.delete("/{run_id}", summary="Run の削除")
def delete_run(
    run_id: str,
    service: RunService = Depends(get_run_service),
    _user: CurrentUser = Depends(require_editor),
) -> dict:
    try:
        service.delete_run(run_id)
    except StoreError as exc:
        raise http_error(exc) from exc
    return {"success": True}


@router.get(
    "/{run_id}/checklist",
    response_model=RunChecklist,
    summary="Run のチェックリストと進捗",
)
def get_run_checklist(
    run_id: str,
    service: RunService = Depends(get_run_service),
    _user: CurrentUser = Depends(get_current_user),
) -> RunChecklist:
    """
    Playbook が削除済みの場合は 404。
    """
    try:
        return service.get_checklist(run_id)
    except StoreError as exc:
        raise http_error(exc) from exc


@router.post(
    "/{run_id}/steps/{step_id}/toggle",
    response_model=PlaybookRun,
    summary="ステップのチェック切り替え",
)
def toggle_step(
    run_id: str,
    step_id: str,
    service: RunService = Depends(get_run_service),
    _user: CurrentUser = Depends(require_editor),
) -> PlaybookRun:
    """
    checked_steps と progress をサーバ側で同時に更新する。
    """
    try:
        return service.toggle_step(run_id, step_id)
    except StoreError as exc:
        raise http_error(exc) from exc
