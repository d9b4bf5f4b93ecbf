from typing import Type, TypeVar, Union
import uuid

from fastapi import Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.i18n import t
from app.services.image_composer import ImageComposer
from app.services.storage import Storage, get_storage

# 라우터 공통 의존성/헬퍼 모음

ModelT = TypeVar("ModelT")


def get_storage_backend() -> Storage:
    """파일 스토리지 의존성 (테스트에서 override 가능)"""
    return get_storage()


def get_image_composer() -> ImageComposer:
    return ImageComposer()


async def get_or_404(
    db: AsyncSession,
    model: Type[ModelT],
    obj_id: Union[str, uuid.UUID],
    name: str,
    lang: str,
) -> ModelT:
    """ID로 조회하고 없으면 다국어 404"""
    result = await db.execute(select(model).where(model.id == obj_id))
    obj = result.scalar_one_or_none()
    if obj is None:
        raise HTTPException(status_code=404, detail=t("not_found", lang, name=name))
    return obj


__all__ = ["get_db", "get_storage_backend", "get_image_composer", "get_or_404", "Depends"]
