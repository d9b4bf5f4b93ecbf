"""
여행 상품 API
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Any, Dict, List, Optional
import uuid
import logging

from app.core.database import get_db
from app.core.i18n import get_lang, t, localize, php_price, price_display_text
from app.core.security import get_current_active_user
from app.dependencies import get_or_404, get_storage_backend
from app.models.product import Product
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse, ScheduleDay, ScheduleSpot
from app.services.activity_service import log_activity
from app.services.storage import Storage, delete_quietly

logger = logging.getLogger(__name__)

router = APIRouter()


def normalize_schedule(days: List[ScheduleDay]) -> List[Dict[str, Any]]:
    """일차를 1..n 으로 다시 매긴다."""
    out = []
    for idx, day in enumerate(days):
        data = day.model_dump(mode="json")
        data["day"] = idx + 1
        out.append(data)
    return out


def clean_items(items: List[str]) -> List[str]:
    return [x.strip() for x in items if x and x.strip()]


def highlights_in_schedule(highlights: List[ScheduleSpot], schedule: List[Dict[str, Any]]) -> bool:
    spot_ids = {s.get("spot_id") for day in schedule for s in (day.get("spots") or [])}
    return all(h.spot_id in spot_ids for h in highlights)


def _to_response(product: Product, lang: str) -> ProductResponse:
    resp = ProductResponse.model_validate(product)
    resp.price_text = price_display_text(product.price, lang)
    resp.main_price = php_price(product.price)
    return resp


@router.get("", response_model=List[ProductResponse])
async def list_products(
    country: Optional[str] = Query(None),
    region: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    lang: str = Depends(get_lang),
):
    """상품 목록 (최신순)"""
    res = await db.execute(select(Product).order_by(Product.created_at.desc()))
    products = list(res.scalars().all())

    def same(value, wanted: str) -> bool:
        return wanted in (localize(value, "ko"), localize(value, "en"))

    if country:
        products = [p for p in products if same(p.country, country)]
    if region:
        products = [p for p in products if same(p.region, region)]
    if q and q.strip():
        needle = q.strip().lower()
        products = [
            p for p in products
            if needle in localize(p.title, "ko").lower() or needle in localize(p.title, "en").lower()
        ]
    return [_to_response(p, lang) for p in products]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    lang: str = Depends(get_lang),
):
    product = await get_or_404(db, Product, product_id, "product", lang)
    return _to_response(product, lang)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """상품 등록"""
    if not payload.title.ko:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields="title.ko"))

    data = payload.model_dump(mode="json")
    data["schedule"] = normalize_schedule(payload.schedule)
    data["included_items"] = clean_items(payload.included_items)
    data["not_included_items"] = clean_items(payload.not_included_items)
    if not highlights_in_schedule(payload.highlights, data["schedule"]):
        raise HTTPException(status_code=400, detail=t("invalid_highlight", lang))

    try:
        product = Product(**data)
        db.add(product)
        await db.commit()
        await db.refresh(product)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[products] create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="product"))

    await log_activity(current_user, "productCreate", f"상품 등록: {localize(product.title, 'ko')}", request)
    return _to_response(product, lang)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """상품 수정 (등록과 같은 정규화 적용)"""
    product = await get_or_404(db, Product, product_id, "product", lang)

    data = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if payload.title is not None and not payload.title.ko:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields="title.ko"))
    if payload.schedule is not None:
        data["schedule"] = normalize_schedule(payload.schedule)
    if payload.included_items is not None:
        data["included_items"] = clean_items(payload.included_items)
    if payload.not_included_items is not None:
        data["not_included_items"] = clean_items(payload.not_included_items)

    schedule = data.get("schedule", product.schedule or [])
    highlights = payload.highlights if payload.highlights is not None else [
        ScheduleSpot.model_validate(h) for h in (product.highlights or [])
    ]
    if not highlights_in_schedule(highlights, schedule):
        raise HTTPException(status_code=400, detail=t("invalid_highlight", lang))

    old_images = set(product.image_urls or [])
    try:
        for field, value in data.items():
            setattr(product, field, value)
        await db.commit()
        await db.refresh(product)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[products] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="product"))

    for url in old_images - set(product.image_urls or []):
        delete_quietly(storage, url, tag="products")
    await log_activity(current_user, "productEdit", f"상품 수정: {localize(product.title, 'ko')}", request)
    return _to_response(product, lang)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """상품 삭제 + 이미지 정리(실패 무시)"""
    product = await get_or_404(db, Product, product_id, "product", lang)
    urls = list(product.image_urls or [])
    title = localize(product.title, "ko")
    try:
        await db.delete(product)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[products] delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="product"))

    for url in urls:
        delete_quietly(storage, url, tag="products")
    await log_activity(current_user, "productDelete", f"상품 삭제: {title}", request)
    return MessageResponse(message=t("deleted", lang, name="product"))
