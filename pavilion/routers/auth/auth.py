# pavilion/routers/auth/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from pavilion.core.db import get_db
from pavilion.schemas.user_schemas import UserLogin, TokenResponse, MessageResponse, UserOut
from pavilion.services.auth_services.auth_service import login, logout_user
from pavilion.utils.get_user import get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
async def login_route(data: UserLogin, db: AsyncSession = Depends(get_db)):
    return await login(db, data.email, data.password)


@router.post("/logout", response_model=MessageResponse)
async def logout(db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    """
    Logs out the user by invalidating every token issued so far.
    """
    return await logout_user(db, current_user)


@router.get("/me", response_model=UserOut)
async def me(current_user=Depends(get_current_user)):
    return UserOut.model_validate(current_user)
