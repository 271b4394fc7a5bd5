# backend/opatlas/notifications/__init__.py

"""
通知レイヤ用モジュール群。

Run の担当割り当て・コメントでのメンション・完了を、
ログとユーザーごとの受信箱に届ける。

構成イメージ:
- schemas: 通知メッセージの共通スキーマ
- service: 通知送信インターフェースと実装
- factory: アプリごとの NotificationService の生成
- router: 受信箱の参照と既読化
"""
