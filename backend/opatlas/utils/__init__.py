# backend/opatlas/utils/__init__.py
"""
共通ユーティリティ。

- config: 環境変数の読み取り
- numbers: 進捗率などの丸め処理
- http: ストア層の例外から HTTPException への変換
- dates: オフセット無しの datetime を UTC として扱う
"""
