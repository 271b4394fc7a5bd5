# backend/opatlas/playbooks/service.py

"""
Playbook 一覧に対する読み取り専用の集計・検索ロジック。

- タグ一覧（タグごとの Playbook 数）
- キーワード検索（タイトル / 概要 / 本文 / タグ / トリガー）

どちらもストアのスナップショットを受け取る純粋関数で、状態は持たない。
"""

from typing import Dict, Iterable, List

from .schemas import Playbook, TagSummary


def summarize_tags(playbooks: Iterable[Playbook]) -> List[TagSummary]:
    """
    タグごとに利用している Playbook をまとめる。

    Playbook 数の多い順、同数ならタグ名順。
    """
    by_tag: Dict[str, List[str]] = {}
    for playbook in playbooks:
        for tag in playbook.tags:
            by_tag.setdefault(tag, []).append(playbook.id)

    summaries = [
        TagSummary(name=name, playbook_count=len(ids), playbook_ids=ids)
        for name, ids in by_tag.items()
    ]
    summaries.sort(key=lambda s: (-s.playbook_count, s.name))
    return summaries


def _searchable_text(playbook: Playbook) -> str:
    parts = [playbook.title, playbook.description, playbook.content_md]
    parts.extend(playbook.tags)
    parts.extend(playbook.triggers)
    return "\n".join(part for part in parts if part).lower()


def search_playbooks(playbooks: Iterable[Playbook], query: str) -> List[Playbook]:
    """
    大文字小文字を区別しない部分一致検索。空白だけのクエリは 0 件。
    """
    needle = (query or "").strip().lower()
    if not needle:
        return []
    return [playbook for playbook in playbooks if needle in _searchable_text(playbook)]
