# backend/opatlas/storage/memory.py

"""
プロセス内メモリに保持するレコードストアの基底クラス。

- ID はストアインスタンスごとの連番（"1", "2", ...）
- 読み取りは常にディープコピー（スナップショット）を返す
- 更新はレコード単位のロック内で read-modify-write を行い、
  コピーに対してパッチを適用してから差し替えるため、途中で例外が出ても部分適用されない

永続化は行わない。再起動でデータは消える前提のプレースホルダ実装。
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from pydantic import BaseModel

from .errors import NotFoundError, ValidationError

RecordT = TypeVar("RecordT", bound=BaseModel)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def require_fields(values: Dict[str, Optional[str]]) -> None:
    """
    必須の文字列フィールドが未指定 / 空文字 / 空白のみでないことを確認する。

    欠けているフィールドがあれば、まとめて ValidationError にする。
    """
    missing = [name for name, value in values.items() if value is None or not value.strip()]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            fields=missing,
        )


def unique_in_order(items: Iterable[str]) -> List[str]:
    """重複を除去しつつ、最初に現れた順序を保つ。"""
    seen = set()
    result: List[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


class InMemoryStore(Generic[RecordT]):
    """
    workspace_id を持つレコードを ID で管理するストア。

    サブクラスは create / list / update を定義し、
    共通の get / delete / _mutate を利用する。
    """

    kind = "record"

    def __init__(self, *, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or utc_now
        self._records: Dict[str, RecordT] = {}
        self._record_locks: Dict[str, threading.Lock] = {}
        # _records / _record_locks / _next_id を保護する。ロック順は常に「レコード -> ストア」。
        self._lock = threading.Lock()
        self._next_id = 1

    # ------------------------------------------------------------------
    # 内部ユーティリティ
    # ------------------------------------------------------------------
    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now

    def _insert(self, build: Callable[[str], RecordT]) -> RecordT:
        """
        新しい ID を払い出し、build(id) で組み立てたレコードを登録する。
        """
        with self._lock:
            record_id = str(self._next_id)
            record = build(record_id)
            self._next_id += 1
            self._records[record_id] = record
            self._record_locks[record_id] = threading.Lock()
        return record.model_copy(deep=True)

    def _lock_for(self, record_id: str) -> threading.Lock:
        with self._lock:
            lock = self._record_locks.get(record_id)
        if lock is None:
            raise NotFoundError(self.kind, record_id)
        return lock

    def _snapshot(self, records: Iterable[RecordT]) -> List[RecordT]:
        return [record.model_copy(deep=True) for record in records]

    def _select(self, workspace_id: str) -> List[RecordT]:
        with self._lock:
            matched = [
                record
                for record in self._records.values()
                if str(getattr(record, "workspace_id")) == str(workspace_id)
            ]
            return self._snapshot(matched)

    def _mutate(
        self,
        record_id: str,
        apply: Callable[[RecordT, datetime], RecordT],
    ) -> RecordT:
        """
        レコード単位の排他区間で read-modify-write を行う。

        apply にはディープコピーを渡すので、apply が例外を投げた場合は
        ストアの内容は一切変わらない。
        """
        lock = self._lock_for(record_id)
        with lock:
            with self._lock:
                current = self._records.get(record_id)
            # 待機中に delete されたケース
            if current is None:
                raise NotFoundError(self.kind, record_id)

            updated = apply(current.model_copy(deep=True), self._now())

            with self._lock:
                self._records[record_id] = updated
        return updated.model_copy(deep=True)

    # ------------------------------------------------------------------
    # 公開 API
    # ------------------------------------------------------------------
    def get(self, record_id: str) -> RecordT:
        with self._lock:
            record = self._records.get(record_id)
        if record is None:
            raise NotFoundError(self.kind, record_id)
        return record.model_copy(deep=True)

    def delete(self, record_id: str) -> None:
        """
        レコードを削除する。存在しない場合は NotFoundError（黙って無視しない）。
        """
        lock = self._lock_for(record_id)
        with lock:
            with self._lock:
                if record_id not in self._records:
                    raise NotFoundError(self.kind, record_id)
                del self._records[record_id]
                del self._record_locks[record_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
