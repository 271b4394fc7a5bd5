# backend/opatlas/utils/dates.py

from datetime import datetime, timezone
from typing import Optional


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    タイムゾーン情報の無い datetime を UTC とみなして aware にする。

    オフセット付きの値と None はそのまま返す。
    "2024-03-01T00:00:00" のようなオフセット無しの ISO 文字列から作ったレコードでも、
    aware な現在時刻との差分計算で TypeError にならないようにするためのもの。
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
