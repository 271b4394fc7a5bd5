# backend/opatlas/runs/__init__.py

"""
Playbook Run（実行記録）を扱うモジュール群。

- schemas: Run / チェックリスト / 集計のスキーマ
- checklist: Markdown 本文からチェックリストを導出
- progress: 進捗率の計算と完了処理
- metrics: ワークスペース単位の集計
- store: Run レコードのストア
- service: 通知を含む Run のユースケース
- router: /runs エンドポイント
"""
