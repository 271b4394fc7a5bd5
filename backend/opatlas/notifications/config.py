# backend/opatlas/notifications/config.py

from dataclasses import dataclass
from functools import lru_cache

from opatlas.utils.config import get_env_int


@dataclass(frozen=True)
class NotificationSettings:
    """通知まわりの設定値。"""

    inbox_limit: int


@lru_cache()
def get_notification_settings() -> NotificationSettings:
    """
    任意:
      - OPATLAS_NOTIFICATION_INBOX_LIMIT（デフォルト 50 件）
    """
    return NotificationSettings(
        inbox_limit=get_env_int("OPATLAS_NOTIFICATION_INBOX_LIMIT", default=50),
    )
