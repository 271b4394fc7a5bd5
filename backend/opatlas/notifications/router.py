# backend/opatlas/notifications/router.py

"""
リクエストユーザー宛ての通知を参照・既読化するルーター。

viewer でも自分の通知は既読にできる。
"""

from fastapi import APIRouter, Depends

from opatlas.auth.dependencies import get_current_user
from opatlas.auth.schemas import CurrentUser
from opatlas.state import get_inbox
from opatlas.storage.errors import StoreError
from opatlas.utils.http import http_error

from .schemas import MarkAllReadResponse, NotificationListResponse, NotificationMessage
from .service import InboxNotificationSender

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse, summary="自分宛ての通知（新しい順）")
def list_notifications(
    inbox: InboxNotificationSender = Depends(get_inbox),
    user: CurrentUser = Depends(get_current_user),
) -> NotificationListResponse:
    return NotificationListResponse(
        items=inbox.list_for(user.id),
        unread_count=inbox.unread_count(user.id),
    )


@router.post("/read-all", response_model=MarkAllReadResponse, summary="すべて既読にする")
def mark_all_read(
    inbox: InboxNotificationSender = Depends(get_inbox),
    user: CurrentUser = Depends(get_current_user),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=inbox.mark_all_read(user.id))


@router.post(
    "/{notification_id}/read",
    response_model=NotificationMessage,
    summary="通知を既読にする",
)
def mark_read(
    notification_id: str,
    inbox: InboxNotificationSender = Depends(get_inbox),
    user: CurrentUser = Depends(get_current_user),
) -> NotificationMessage:
    try:
        return inbox.mark_read(user.id, notification_id)
    except StoreError as exc:
        raise http_error(exc) from exc
