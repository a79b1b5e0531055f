"""
Caller authentication for the HTTP API
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError

from invoice_service.config import settings

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def unauthenticated(message: str = "The function must be called while authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": "unauthenticated", "message": message},
        headers={"WWW-Authenticate": "Bearer"}
    )


def get_current_caller_id(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    """
    Resolve the caller's user id from a bearer token

    Only verifies the token; no database access happens here.
    """
    if not token:
        raise unauthenticated()

    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        raise unauthenticated("Invalid or expired token")
    return str(payload["sub"])
