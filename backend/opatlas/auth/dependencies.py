# backend/opatlas/auth/dependencies.py

"""
FastAPI の依存関数としてリクエストユーザーを解決する。

認証基盤（セッション管理）は外部にある前提で、
リバースプロキシ等が付与するヘッダからユーザー情報と権限を受け取る。
ヘッダが無い場合は AuthSettings のデモ用ユーザーとして扱う。
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from .config import get_auth_settings
from .schemas import CurrentUser, WorkspaceRole


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_workspace_role: Optional[str] = Header(None),
) -> CurrentUser:
    settings = get_auth_settings()
    raw_role = x_workspace_role or settings.default_role

    try:
        role = WorkspaceRole(raw_role.lower())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown workspace role: {raw_role}",
        ) from exc

    return CurrentUser(
        id=x_user_id or settings.default_user_id,
        name=x_user_name or settings.default_user_name,
        email=x_user_email or settings.default_user_email,
        role=role,
    )


def require_editor(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """
    変更系エンドポイント用。viewer は 403 にする。
    """
    if not user.can_edit():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Editor or owner role is required.",
        )
    return user
