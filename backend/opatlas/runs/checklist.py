# backend/opatlas/runs/checklist.py

"""
Playbook 本文（Markdown）からチェックリストを導出する。

行ごとに以下の順で判定し、最初に一致したものだけを採用する。

1. 見出し（# 〜 ######）       -> heading
2. チェックボックス（[ ] ...）  -> checkbox
3. 箇条書き / 番号付きリスト    -> checkbox（**太字** は外す）

それ以外の行は無視する。ID のカウンタは種別に関係なく出力した要素ごとに 1 増えるので、
"h-0, step-1, step-2, h-3, ..." のように見出しとステップで連番を共有する。
"""

import re
from typing import Iterable, List

from .schemas import ChecklistItem, ChecklistItemKind

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_CHECKBOX_RE = re.compile(r"^[\s-]*\[\s*\]\s+(.+)$")
_LIST_ITEM_RE = re.compile(r"^[\s-]*(?:\d+\.|\*|-)\s+(?:\*\*)?(.+?)(?:\*\*)?(?:\s*\(|$)")


def parse_checklist(markdown: str, checked_steps: Iterable[str] = ()) -> List[ChecklistItem]:
    """
    Markdown を走査してチェックリストを返す。

    :param markdown: Playbook 本文
    :param checked_steps: Run でチェック済みのステップ ID。checked の判定に使う。
    """
    checked = set(checked_steps)
    items: List[ChecklistItem] = []
    counter = 0

    for line in (markdown or "").splitlines():
        heading = _HEADING_RE.match(line)
        if heading:
            items.append(
                ChecklistItem(
                    id=f"h-{counter}",
                    text=heading.group(2).strip(),
                    kind=ChecklistItemKind.HEADING,
                    level=len(heading.group(1)),
                )
            )
            counter += 1
            continue

        step = _CHECKBOX_RE.match(line) or _LIST_ITEM_RE.match(line)
        if step:
            step_id = f"step-{counter}"
            items.append(
                ChecklistItem(
                    id=step_id,
                    text=step.group(1).strip(),
                    kind=ChecklistItemKind.CHECKBOX,
                    checked=step_id in checked,
                )
            )
            counter += 1

    return items


def checkbox_ids(items: Iterable[ChecklistItem]) -> List[str]:
    """チェック可能なステップの ID だけを出現順で返す。"""
    return [item.id for item in items if item.kind == ChecklistItemKind.CHECKBOX]
