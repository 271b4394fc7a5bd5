# backend/opatlas/storage/__init__.py
"""
Playbook / Run レコードを保持するストア層。

- errors: ValidationError / NotFoundError
- memory: プロセス内メモリのストア基底クラス
"""

from .errors import NotFoundError, StoreError, ValidationError  # noqa: F401
from .memory import InMemoryStore  # noqa: F401
