# backend/opatlas/activity/__init__.py
"""
Playbook と Run から導出するアクティビティフィード。
"""
