# backend/opatlas/notifications/factory.py

"""
通知サービスの簡易ファクトリ。

LoggingNotificationSender と InboxNotificationSender を登録した
CompositeNotificationService を組み立てる。アプリごとに 1回だけ呼び、
AppState 経由で各サービスに渡す。
"""

from __future__ import annotations

from typing import Optional, Tuple

from .config import get_notification_settings
from .service import (
    CompositeNotificationService,
    InboxNotificationSender,
    LoggingNotificationSender,
)


def build_notification_service(
    inbox: Optional[InboxNotificationSender] = None,
) -> Tuple[CompositeNotificationService, InboxNotificationSender]:
    """
    (ファンアウト用サービス, 受信箱) の組を返す。

    受信箱は GET /notifications から参照するため、呼び出し側で保持しておく。
    """
    if inbox is None:
        inbox = InboxNotificationSender(limit=get_notification_settings().inbox_limit)
    service = CompositeNotificationService([LoggingNotificationSender(), inbox])
    return service, inbox
