"""
인증 관련 API 라우터
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_token,
    get_current_active_user,
)
from app.models.user import User
from app.schemas.auth import LoginRequest, Token, RefreshTokenRequest, VerifyTokenResponse
from app.schemas.user import UserResponse
from app.services.activity_service import log_activity
from app.services.user_service import get_user_by_email, get_user_by_id

router = APIRouter()


def _issue_tokens(user: User) -> dict:
    sub = {"sub": str(user.id)}
    return {
        "access_token": create_access_token(sub),
        "refresh_token": create_refresh_token(sub),
        "token_type": "bearer",
        "expires_in": settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


@router.post("/login", response_model=Token)
async def login(
    payload: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    lang: str = Depends(get_lang),
):
    """관리자 로그인"""
    user = await get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=t("login_failed", lang),
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.disabled:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=t("user_disabled", lang))

    tokens = _issue_tokens(user)
    await log_activity(user, "login", f"{user.email} 로그인", request)
    return tokens


@router.post("/refresh", response_model=Token)
async def refresh_token(
    token_data: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
    lang: str = Depends(get_lang),
):
    """토큰 갱신"""
    payload = verify_token(token_data.refresh_token, "refresh")
    user = await get_user_by_id(db, payload.get("sub")) if payload and payload.get("sub") else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=t("invalid_refresh_token", lang),
            headers={"WWW-Authenticate": "Bearer"},
        )
    if user.disabled:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=t("user_disabled", lang))
    return _issue_tokens(user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_active_user)):
    """현재 로그인 사용자"""
    return current_user


@router.post("/verify-token", response_model=VerifyTokenResponse)
async def verify_access_token(current_user: User = Depends(get_current_active_user)):
    """Bearer 토큰 유효성 확인 (유효하지 않으면 401)"""
    return VerifyTokenResponse(
        valid=True,
        uid=current_user.id,
        email=current_user.email,
        role=current_user.role,
    )
