# backend/opatlas/notifications/service.py

"""
通知送信インターフェースと実装。

- NotificationMessage を受け取る send() インターフェース
- ログ出力のみ行う LoggingNotificationSender
- ユーザーごとの受信箱をメモリに持つ InboxNotificationSender
- 複数 Sender にファンアウトする CompositeNotificationService

メール / Slack などの実送信は Sender を追加するだけで差し込める。
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Dict, Iterable, List, Protocol

from opatlas.storage.errors import NotFoundError

from .schemas import NotificationMessage

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    """
    通知送信の最小インターフェース。
    """

    def send(self, message: NotificationMessage) -> None:  # pragma: no cover - Protocol
        ...


class LoggingNotificationSender:
    """
    NotificationMessage を Python の logger に記録するだけの Sender。
    """

    def __init__(self, logger_: logging.Logger | None = None) -> None:
        self._logger = logger_ or logger

    def send(self, message: NotificationMessage) -> None:
        self._logger.info(
            "[%s] to=%s %s %s",
            message.type.value,
            message.recipient_id,
            message.title,
            message.body,
        )


class InboxNotificationSender:
    """
    宛先ユーザーごとに直近の通知を保持する Sender。

    - 新しい順に最大 limit 件まで保持し、古いものから捨てる
    - 既読 / 未読を管理する
    """

    def __init__(self, *, limit: int = 50) -> None:
        self._limit = max(1, int(limit))
        self._inboxes: Dict[str, Deque[NotificationMessage]] = {}
        self._lock = threading.Lock()

    def send(self, message: NotificationMessage) -> None:
        with self._lock:
            inbox = self._inboxes.setdefault(
                message.recipient_id, deque(maxlen=self._limit)
            )
            inbox.appendleft(message.model_copy(deep=True))

    def list_for(self, user_id: str) -> List[NotificationMessage]:
        with self._lock:
            inbox = self._inboxes.get(user_id, ())
            return [message.model_copy(deep=True) for message in inbox]

    def unread_count(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for message in self._inboxes.get(user_id, ()) if not message.read)

    def mark_read(self, user_id: str, notification_id: str) -> NotificationMessage:
        with self._lock:
            for message in self._inboxes.get(user_id, ()):
                if message.id == notification_id:
                    message.read = True
                    return message.model_copy(deep=True)
        raise NotFoundError("notification", notification_id)

    def mark_all_read(self, user_id: str) -> int:
        """未読だったものを既読にし、その件数を返す。"""
        updated = 0
        with self._lock:
            for message in self._inboxes.get(user_id, ()):
                if not message.read:
                    message.read = True
                    updated += 1
        return updated


class CompositeNotificationService:
    """
    複数の NotificationSender に通知をファンアウトするサービス。
    """

    def __init__(self, senders: Iterable[NotificationSender]) -> None:
        self._senders: List[NotificationSender] = list(senders)

    def send(self, message: NotificationMessage) -> None:
        """
        受け取った NotificationMessage を全 Sender に送信する。
        """
        for sender in self._senders:
            try:
                sender.send(message)
            except Exception:  # noqa: BLE001 - 通知は本処理を止めない
                logger.exception("Notification sender failed. Continuing with others.")
