# backend/opatlas/playbooks/__init__.py

"""
Playbook（Markdown の運用手順書）を扱うモジュール群。

- schemas: Playbook / 作成・更新リクエストのスキーマ
- store: Playbook レコードのストア
- service: タグ一覧と検索
- router: /playbooks エンドポイント
"""
