"""
인증 관련 Pydantic 스키마
"""

from pydantic import BaseModel, EmailStr
from typing import Optional
import uuid


class LoginRequest(BaseModel):
    """로그인 요청 스키마"""
    email: EmailStr
    password: str


class Token(BaseModel):
    """토큰 응답 스키마"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RefreshTokenRequest(BaseModel):
    """리프레시 토큰 요청 스키마"""
    refresh_token: str


class VerifyTokenResponse(BaseModel):
    valid: bool
    uid: Optional[uuid.UUID] = None
    email: Optional[str] = None
    role: Optional[str] = None
