"""
사용자 관련 서비스
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Union, List, Tuple
import uuid

from app.models.user import User


async def get_user_by_id(db: AsyncSession, user_id: Union[str, uuid.UUID]) -> Optional[User]:
    """ID로 사용자 조회"""
    try:
        user_uuid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
    except ValueError:
        return None
    result = await db.execute(select(User).where(User.id == user_uuid))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """이메일로 사용자 조회 (대소문자 무시)"""
    result = await db.execute(select(User).where(func.lower(User.email) == (email or "").strip().lower()))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    email: str,
    password_hash: str,
    display_name: Optional[str] = None,
    role: str = "user",
    team: Optional[str] = None,
) -> User:
    """사용자 생성"""
    user = User(
        email=email.strip().lower(),
        display_name=display_name,
        hashed_password=password_hash,
        role=role,
        team=team,
        disabled=False,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def list_users(db: AsyncSession) -> Tuple[List[User], int]:
    """전체 사용자 (최신 가입순)"""
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    users = list(result.scalars().all())
    return users, len(users)
