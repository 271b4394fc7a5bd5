# backend/opatlas/storage/errors.py

"""
ストア層の例外定義。

いずれもリクエスト単位で回復可能なエラーで、router 層で HTTP ステータスに変換する。
- ValidationError -> 400
- NotFoundError   -> 404
"""

from typing import Sequence


class StoreError(RuntimeError):
    """ストア操作全般の基底例外。"""


class ValidationError(StoreError):
    """作成・更新時に必須フィールドが欠けている / 空の場合の例外。"""

    def __init__(self, message: str, *, fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.fields = list(fields)


class NotFoundError(StoreError):
    """存在しない ID を参照した場合の例外。"""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id
