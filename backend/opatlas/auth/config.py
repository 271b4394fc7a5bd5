# backend/opatlas/auth/config.py

"""
認証ヘッダが無い場合に使うデモ用ユーザーの設定値。
"""

from dataclasses import dataclass
from functools import lru_cache

from opatlas.utils.config import get_env


@dataclass(frozen=True)
class AuthSettings:
    default_user_id: str
    default_user_name: str
    default_user_email: str
    default_role: str


@lru_cache()
def get_auth_settings() -> AuthSettings:
    """
    任意:
      - OPATLAS_DEFAULT_USER_ID    (デフォルト: 1)
      - OPATLAS_DEFAULT_USER_NAME  (デフォルト: Demo User)
      - OPATLAS_DEFAULT_USER_EMAIL (デフォルト: demo@opatlas.com)
      - OPATLAS_DEFAULT_ROLE       (デフォルト: owner)
    """
    return AuthSettings(
        default_user_id=get_env("OPATLAS_DEFAULT_USER_ID", default="1", required=False),
        default_user_name=get_env(
            "OPATLAS_DEFAULT_USER_NAME",
            default="Demo User",
            required=False,
        ),
        default_user_email=get_env(
            "OPATLAS_DEFAULT_USER_EMAIL",
            default="demo@opatlas.com",
            required=False,
        ),
        default_role=get_env("OPATLAS_DEFAULT_ROLE", default="owner", required=False),
    )
