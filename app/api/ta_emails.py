"""
TA 단체 이메일 API

흐름: /images 로 TA별 합성 이미지 생성 → /send 로 발송 → /cleanup 으로 세션 파일 정리
발송 후 수신확인 상태는 /history/{id}/status 로 갱신한다.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile
from typing import Any, Dict, List
import uuid
import base64
import binascii
import json
import logging

from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.security import get_current_active_user
from app.dependencies import get_image_composer, get_or_404, get_storage_backend
from app.models.email_history import EmailHistory
from app.models.user import User
from app.schemas.travel_agent import (
    CleanupRequest,
    CleanupResponse,
    DeliveryStatusResponse,
    DeliveryStatusUpdate,
    EmailHistoryResponse,
    EmailImageRequest,
    EmailImageResponse,
    SendEmailResponse,
)
from app.services import ta_mailer
from app.services.image_composer import ImageComposer
from app.services.mail_service import MailAttachment
from app.services.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _decode_attachment(raw: str) -> bytes:
    """base64 또는 data URL 본문을 디코드"""
    if raw.startswith("data:"):
        raw = raw.partition(",")[2]
    return base64.b64decode(raw, validate=False)


def _json_list(raw: Any) -> List[Any]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return value if isinstance(value, list) else []


def _is_true(raw: Any) -> bool:
    return str(raw or "").strip().lower() in ("true", "1", "yes", "on")


@router.post("/images", response_model=EmailImageResponse)
async def generate_images(
    payload: EmailImageRequest,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    composer: ImageComposer = Depends(get_image_composer),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """첨부 이미지에 TA별 로고를 합성"""
    if not payload.ta_ids:
        raise HTTPException(status_code=400, detail=t("ta_ids_required", lang))
    if not payload.attachment_base64:
        raise HTTPException(status_code=400, detail=t("attachment_required", lang))

    try:
        attachment = _decode_attachment(payload.attachment_base64)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail=t("invalid_image", lang))

    tas = await ta_mailer.load_tas(db, payload.ta_ids)
    if not tas:
        raise HTTPException(status_code=404, detail=t("not_found", lang, name="ta"))

    try:
        session_id, timestamp, results = await ta_mailer.generate_email_images(
            tas, attachment, storage=storage, composer=composer,
        )
    except ValueError:
        raise HTTPException(status_code=400, detail=t("invalid_image", lang))
    except Exception as e:
        logger.exception(f"[ta-emails] image generation failed: {e}")
        raise HTTPException(status_code=500, detail=t("image_generation_failed", lang))

    logger.info(f"[ta-emails] {len(results)}개 이미지 생성 (session={session_id})")
    return EmailImageResponse(results=results, session_id=session_id, timestamp=timestamp)


async def _read_attachments(form) -> List[MailAttachment]:
    """attachment_0..N 파일 필드 수집 (attachmentCount 가 없으면 존재하는 만큼)"""
    try:
        count = int(form.get("attachmentCount") or 0)
    except ValueError:
        count = 0
    keys = [f"attachment_{i}" for i in range(count)] if count else sorted(
        (k for k in form.keys() if k.startswith("attachment_") and k[len("attachment_"):].isdigit()),
        key=lambda k: int(k[len("attachment_"):]),
    )
    attachments: List[MailAttachment] = []
    for key in keys:
        item = form.get(key)
        if not isinstance(item, UploadFile):
            continue
        attachments.append(MailAttachment(
            filename=item.filename or key,
            content_type=item.content_type or "application/octet-stream",
            data=await item.read(),
        ))
    return attachments


@router.post("/send", response_model=SendEmailResponse)
async def send_emails(
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    composer: ImageComposer = Depends(get_image_composer),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """
    TA별 순차 발송 (multipart)

    - subject, content, taIds(JSON), imageUrls(JSON, taIds 순서), includeLogo
    - attachment_<i> 파일들
    """
    form = await request.form()
    subject = str(form.get("subject") or "").strip()
    content = str(form.get("content") or "").strip()
    ta_ids = [str(x) for x in _json_list(form.get("taIds"))]
    image_urls = _json_list(form.get("imageUrls"))
    include_logo = _is_true(form.get("includeLogo"))

    missing = [name for name, value in (("subject", subject), ("content", content)) if not value]
    if missing:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields=", ".join(missing)))
    if not ta_ids:
        raise HTTPException(status_code=400, detail=t("ta_ids_required", lang))

    tas = await ta_mailer.load_tas(db, ta_ids)
    if not tas:
        raise HTTPException(status_code=404, detail=t("not_found", lang, name="ta"))

    # imageUrls 는 요청한 taIds 순서에 맞춰 온다
    url_by_ta: Dict[str, str] = {
        ta_id: url for ta_id, url in zip(ta_ids, image_urls) if isinstance(url, str) and url
    }
    attachments = await _read_attachments(form)

    try:
        results = await ta_mailer.send_ta_emails(
            tas=tas,
            subject=subject,
            content=content,
            image_urls=url_by_ta,
            include_logo=include_logo,
            attachments=attachments,
            sender=current_user,
            storage=storage,
            composer=composer,
        )
    except Exception as e:
        logger.exception(f"[ta-emails] send failed: {e}")
        raise HTTPException(status_code=500, detail=t("email_send_failed", lang))

    success_count = sum(1 for r in results if r["success"])
    fail_count = len(results) - success_count
    message = t("emails_sent", lang, count=success_count)
    if fail_count:
        message += t("emails_failed_suffix", lang, count=fail_count)

    return SendEmailResponse(
        success=success_count > 0,
        message=message,
        success_count=success_count,
        fail_count=fail_count,
        results=results,
    )


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_images(
    payload: CleanupRequest,
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """세션 폴더(email-images/<sessionId>/) 정리"""
    if not payload.session_id:
        raise HTTPException(status_code=400, detail=t("session_required", lang))
    if not ta_mailer.is_valid_session_id(payload.session_id):
        raise HTTPException(status_code=400, detail=t("session_required", lang))

    deleted, failed = ta_mailer.cleanup_session(storage, payload.session_id)
    message = t("files_deleted", lang, count=len(deleted))
    if failed:
        message += t("files_failed_suffix", lang, count=len(failed))
    return CleanupResponse(success=True, message=message, deleted=deleted, failed=failed)


@router.put("/history/{history_id}/status", response_model=DeliveryStatusResponse)
async def update_delivery_status(
    history_id: uuid.UUID,
    payload: DeliveryStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """발송 이력의 전달/수신확인 상태 갱신"""
    history = await get_or_404(db, EmailHistory, history_id, "email_history", lang)
    if payload.delivery_status is None and payload.read_status is None:
        raise HTTPException(status_code=400, detail=t("delivery_status_required", lang))

    try:
        if payload.delivery_status:
            history.delivery_status = payload.delivery_status
        if payload.read_status:
            history.read_status = payload.read_status
        await db.commit()
        await db.refresh(history)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[ta-emails] delivery status update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="email_history"))

    return DeliveryStatusResponse(
        message=t("delivery_status_updated", lang),
        history=EmailHistoryResponse.model_validate(history),
    )
