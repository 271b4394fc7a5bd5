# backend/opatlas/playbooks/router.py

"""
Playbook 用の FastAPI ルーター定義。

- /playbooks
- /playbooks/tags, /playbooks/search
- /playbooks/{id}, /playbooks/{id}/checklist
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from opatlas.auth.dependencies import get_current_user, require_editor
from opatlas.auth.schemas import CurrentUser
from opatlas.runs.checklist import parse_checklist
from opatlas.runs.schemas import ChecklistItem
from opatlas.state import get_playbook_store
from opatlas.storage.errors import StoreError
from opatlas.utils.http import http_error

from .schemas import Playbook, PlaybookCreate, PlaybookUpdate, TagSummary
from .service import search_playbooks, summarize_tags
from .store import PlaybookStore

router = APIRouter(prefix="/playbooks", tags=["playbooks"])


@router.get("", response_model=List[Playbook], summary="ワークスペースの Playbook 一覧")
def list_playbooks(
    workspace_id: str = Query(..., description="ワークスペース ID"),
    store: PlaybookStore = Depends(get_playbook_store),
    _user: CurrentUser = Depends(get_current_user),
) -> List[Playbook]:
    return store.list(workspace_id)


@router.post(
    "",
    response_model=Playbook,
    status_code=status.HTTP_201_CREATED,
    summary="Playbook の作成",
)
def create_playbook(
    body: PlaybookCreate,
    store: PlaybookStore = Depends(get_playbook_store),
    user: CurrentUser = Depends(require_editor),
) -> Playbook:
    """
    - workspace_id / title / content_md が無い場合は 400
    - 作成者はリクエストユーザー
    """
    try:
        return store.create(body, author=user.as_author())
    except StoreError as exc:
        raise http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create playbook.",
        ) from exc


@router.get("/tags", response_model=List[TagSummary], summary="タグ一覧")
def list_tags(
    workspace_id: str = Query(..., description="ワークスペース ID"),
    store: PlaybookStore = Depends(get_playbook_store),
    _user: CurrentUser = Depends(get_current_user),
) -> List[TagSummary]:
    return summarize_tags(store.list(workspace_id))


@router.get("/search", response_model=List[Playbook], summary="Playbook の検索")
def search(
    workspace_id: str = Query(..., description="ワークスペース ID"),
    q: str = Query("", description="検索キーワード"),
    store: PlaybookStore = Depends(get_playbook_store),
    _user: CurrentUser = Depends(get_current_user),
) -> List[Playbook]:
    return search_playbooks(store.list(workspace_id), q)


@router.get("/{playbook_id}", response_model=Playbook, summary="Playbook の取得")
def get_playbook(
    playbook_id: str,
    store: PlaybookStore = Depends(get_playbook_store),
    _user: CurrentUser = Depends(get_current_user),
) -> Playbook:
    try:
        return store.get(playbook_id)
    except StoreError as exc:
        raise http_error(exc) from exc


@router.get(
    "/{playbook_id}/checklist",
    response_model=List[ChecklistItem],
    summary="Playbook 本文から導出したチェックリスト",
)
def get_playbook_checklist(
    playbook_id: str,
    store: PlaybookStore = Depends(get_playbook_store),
    _user: CurrentUser = Depends(get_current_user),
) -> List[ChecklistItem]:
    try:
        playbook = store.get(playbook_id)
    except StoreError as exc:
        raise http_error(exc) from exc
    return parse_checklist(playbook.content_md)


@router.patch("/{playbook_id}", response_model=Playbook, summary="Playbook の部分更新")
def update_playbook(
    playbook_id: str,
    body: PlaybookUpdate,
    store: PlaybookStore = Depends(get_playbook_store),
    _user: CurrentUser = Depends(require_editor),
) -> Playbook:
    try:
        return store.update(playbook_id, body)
    except StoreError as exc:
        raise http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update playbook.",
        ) from exc


@router.delete("/{playbook_id}", summary="Playbook の削除")
def delete_playbook(
    playbook_id: str,
    store: PlaybookStore = Depends(get_playbook_store),
    _user: CurrentUser = Depends(require_editor),
) -> dict:
    """
    Playbook を参照している Run はそのまま残す（タイトルのスナップショットを持っているため）。
    """
    try:
        store.delete(playbook_id)
    except StoreError as exc:
        raise http_error(exc) from exc
    return {"success": True}
