# backend/tests/conftest.py
"""
Pytest configuration for OpAtlas backend tests.

- Ensures that the project root (backend/) is added to sys.path
  so that `import opatlas.*` works correctly in tests.
- Sets the optional OPATLAS_* environment variables to their documented
  defaults so that a developer's local env does not leak into the tests.
- Provides a controllable clock for stores and time-based calculations.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        # Insert at the beginning so it has priority over site-packages, etc.
        sys.path.insert(0, project_root_str)


def _ensure_test_env_vars() -> None:
    """
    Set the environment variables read by the settings modules.

    These are the same values as the built-in defaults.
    """
    os.environ.setdefault("OPATLAS_RECENT_RUNS_LIMIT", "20")
    os.environ.setdefault("OPATLAS_MAX_RECOMMENDATIONS", "5")
    os.environ.setdefault("OPATLAS_NOTIFICATION_INBOX_LIMIT", "50")
    os.environ.setdefault("OPATLAS_DEFAULT_ROLE", "owner")


_ensure_project_root_in_sys_path()
_ensure_test_env_vars()


T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """テスト用の手動で進める時計。"""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
