# backend/opatlas/utils/config.py

"""
環境変数読み取り用のユーティリティ。
playbooks / recommendations / notifications / auth の各 config から共通利用する。
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


class EnvVarMissingError(RuntimeError):
    """必須環境変数が設定されていない場合に投げる例外。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required environment variable '{name}' is not set.")
        self.name = name


def get_env(
    name: str,
    default: Optional[str] = None,
    *,
    required: bool = True,
) -> str:
    """
    環境変数を取得するヘルパー。

    :param name: 環境変数名
    :param default: デフォルト値（required=False の場合のみ使用）
    :param required: True の場合、未設定なら例外を投げる
    :return: 文字列値
    """
    value = os.getenv(name)

    if value is None or value == "":
        if required:
            raise EnvVarMissingError(name)
        return default

    return value


def get_env_int(name: str, default: int) -> int:
    """
    整数の環境変数を取得するユーティリティ。

    - 未設定の場合は default を返す。
    - パース不能な値の場合は warning を残して default を返す。
    """
    raw = get_env(name, required=False)
    if raw is None:
        return default

    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid integer value for env var %s: %r. Using default %s.",
            name,
            raw,
            default,
        )
        return default
