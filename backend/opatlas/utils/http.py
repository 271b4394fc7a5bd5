# backend/opatlas/utils/http.py

"""
ストア層の例外を HTTPException に変換するヘルパー。
"""

from fastapi import HTTPException, status

from opatlas.storage.errors import NotFoundError, StoreError, ValidationError


def http_error(exc: StoreError) -> HTTPException:
    """
    - ValidationError -> 400
    - NotFoundError   -> 404
    - それ以外        -> 500
    """
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Unexpected store error.",
    )
