# backend/opatlas/auth/__init__.py
"""
リクエストユーザーとワークスペース権限の解決。
"""
