"""
관리자 활동 기록 서비스
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
import logging
import uuid

from fastapi import Request
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import AsyncSessionLocal
from app.models.activity_log import ActivityLog
from app.models.user import User


logger = logging.getLogger(__name__)


def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


async def record_activity(
    db: AsyncSession,
    *,
    action: str,
    details: str,
    user_id: Optional[uuid.UUID] = None,
    user_email: Optional[str] = None,
    request: Optional[Request] = None,
    workspace: Optional[str] = None,
) -> ActivityLog:
    """활동 로그 저장 + 사용자 last_activity_at 갱신"""
    log = ActivityLog(
        user_id=user_id,
        user_email=user_email,
        action=action,
        details=details,
        ip_address=client_ip(request),
        user_agent=(request.headers.get("user-agent") if request else None),
        workspace=workspace,
    )
    db.add(log)
    if user_id is not None:
        user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
        if user is not None:
            user.last_activity_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(log)
    return log


async def log_activity(
    user: User,
    action: str,
    details: str,
    request: Optional[Request] = None,
) -> None:
    """본 작업이 끝난 뒤 남기는 감사 기록. 요청 세션과 분리된 세션에 쓰고, 실패해도 요청은 성공으로 둔다."""
    try:
        async with AsyncSessionLocal() as log_db:
            await record_activity(
                log_db,
                action=action,
                details=details,
                user_id=user.id,
                user_email=user.email,
                request=request,
            )
    except Exception as e:
        logger.warning(f"[activity] 기록 실패 ({action}): {e}")


async def list_activities(
    db: AsyncSession,
    user_id: Optional[uuid.UUID] = None,
    limit: int = 100,
) -> List[ActivityLog]:
    stmt = select(ActivityLog)
    if user_id is not None:
        stmt = stmt.where(ActivityLog.user_id == user_id)
    stmt = stmt.order_by(ActivityLog.created_at.desc()).limit(limit)
    return list((await db.execute(stmt)).scalars().all())


async def activity_stats(db: AsyncSession, user_id: uuid.UUID) -> Tuple[int, Dict[str, int], Optional[datetime]]:
    """사용자별 액션 카운트와 마지막 활동 시각"""
    rows = (await db.execute(
        select(ActivityLog.action, func.count(ActivityLog.id))
        .where(ActivityLog.user_id == user_id)
        .group_by(ActivityLog.action)
    )).all()
    counts = Counter({action: int(cnt) for action, cnt in rows})
    last = (await db.execute(
        select(func.max(ActivityLog.created_at)).where(ActivityLog.user_id == user_id)
    )).scalar_one_or_none()
    return sum(counts.values()), dict(counts), last
