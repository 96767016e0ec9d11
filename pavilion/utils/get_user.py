# pavilion/utils/get_user.py
from typing import Optional
from fastapi import Depends, HTTPException, Header
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from pavilion.models.user_models import User
from pavilion.core.db import get_db
from pavilion.core.security import decode_token


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization.split("Bearer ", 1)[1].strip()
    return None


async def _user_from_token(raw_token: str, db: AsyncSession) -> User:
    try:
        payload = decode_token(raw_token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user_id = payload.get("user_id")
    token_version = payload.get("token_version")
    if not user_id or token_version is None or payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if user.token_version != token_version:
        raise HTTPException(status_code=401, detail="Token invalidated. Please log in again.")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is inactive.")
    return user


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    raw_token = _bearer(authorization)
    if not raw_token:
        raise HTTPException(status_code=401, detail="Missing access token")

    user = await _user_from_token(raw_token, db)
    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Storefront routes: anonymous callers are fine, a bad token is not."""
    raw_token = _bearer(authorization)
    if not raw_token:
        return None
    user = await _user_from_token(raw_token, db)
    request.state.user = user
    return user
