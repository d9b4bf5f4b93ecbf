"""
TA 단체 메일 서비스

1) 첨부 이미지에 TA별 로고를 합성해 email-images/<session>/ 아래에 저장
2) TA별로 순차 발송 (수신자 하나가 실패해도 나머지는 계속)
3) 발송 후 세션 폴더 정리
"""

import logging
import random
import re
import string
import uuid
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import AsyncSessionLocal
from app.models.email_history import EmailHistory
from app.models.travel_agent import TravelAgent
from app.models.user import User
from app.services.image_composer import ImageComposer
from app.services.mail_service import MailAttachment, send_email
from app.services.storage import Storage, delete_quietly, now_ms


logger = logging.getLogger(__name__)

SESSION_PREFIX = "email-images"
_SESSION_RE = re.compile(r"^session_\d+_[a-z0-9]+$")


def new_session_id(timestamp: Optional[int] = None) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"session_{timestamp or now_ms()}_{suffix}"


def is_valid_session_id(session_id: Optional[str]) -> bool:
    return bool(session_id and _SESSION_RE.match(session_id))


async def load_tas(db: AsyncSession, ta_ids: Sequence[str]) -> List[TravelAgent]:
    """요청 순서를 유지해 TA를 조회한다. 잘못된/없는 ID는 건너뛴다."""
    wanted: List[uuid.UUID] = []
    for raw in ta_ids:
        try:
            wanted.append(uuid.UUID(str(raw)))
        except ValueError:
            logger.warning(f"[ta-mail] 잘못된 TA ID 무시: {raw}")
    if not wanted:
        return []
    rows = (await db.execute(select(TravelAgent).where(TravelAgent.id.in_(wanted)))).scalars().all()
    by_id = {ta.id: ta for ta in rows}
    return [by_id[i] for i in wanted if i in by_id]


async def generate_email_images(
    tas: Sequence[TravelAgent],
    attachment: bytes,
    *,
    storage: Storage,
    composer: ImageComposer,
) -> Tuple[str, int, List[Dict]]:
    """
    TA별 로고 합성 이미지를 만든다.

    Returns: (session_id, timestamp, results)
    첨부가 이미지가 아니면 ValueError
    """
    source_webp = composer.to_webp(attachment)

    timestamp = now_ms()
    session_id = new_session_id(timestamp)
    folder = f"{SESSION_PREFIX}/{session_id}"
    original_key = f"{folder}/original.webp"
    original_url = storage.save_bytes(source_webp, content_type="image/webp", key=original_key)

    results: List[Dict] = []
    original_used = False
    for ta in tas:
        ta_id = str(ta.id)
        try:
            final = source_webp
            if ta.logo:
                try:
                    logo = await composer.fetch_bytes(ta.logo, storage)
                    final = composer.composite_logo(attachment, logo)
                except Exception as e:
                    # 로고 처리 실패 시 원본 이미지 사용
                    logger.warning(f"[ta-mail] TA {ta.company_name} 로고 처리 실패: {e}")

            final_key = f"{folder}/{ta_id}.webp"
            final_url = storage.save_bytes(final, content_type="image/webp", key=final_key)

            thumb_key = f"{folder}/thumb_{ta_id}.webp"
            thumb_url = storage.save_bytes(composer.thumbnail(final), content_type="image/webp", key=thumb_key)

            results.append({
                "ta_id": ta_id,
                "ta_name": ta.company_name,
                "image_url": final_url,
                "thumbnail_url": thumb_url,
                "file_name": final_key,
                "thumbnail_file_name": thumb_key,
            })
        except Exception as e:
            logger.exception(f"[ta-mail] TA {ta.company_name} 이미지 처리 실패: {e}")
            original_used = True
            results.append({
                "ta_id": ta_id,
                "ta_name": ta.company_name,
                "image_url": original_url,
                "thumbnail_url": original_url,
                "file_name": original_key,
                "thumbnail_file_name": original_key,
                "error": str(e) or "처리 실패",
            })

    # 원본을 대신 돌려준 TA가 없으면 로고 합성본만 남긴다
    if not original_used:
        delete_quietly(storage, original_key, tag="ta-mail")
    return session_id, timestamp, results


def _compose_body(content: str, sender_email: str, company_name: str) -> str:
    return f"{content}\n\n---\n발송자: {sender_email}\n회사: {company_name}"


async def _attachments_for(
    ta: TravelAgent,
    attachments: Sequence[MailAttachment],
    image_url: Optional[str],
    include_logo: bool,
    storage: Storage,
    composer: ImageComposer,
) -> List[MailAttachment]:
    """TA 한 명에게 보낼 첨부 목록. 개별 첨부 실패는 건너뛴다."""
    out: List[MailAttachment] = []
    for att in attachments:
        try:
            if include_logo and att.content_type.startswith("image/") and image_url:
                data = await composer.fetch_bytes(image_url, storage)
                out.append(MailAttachment(
                    filename=f"{ta.company_name}_{att.filename}",
                    content_type="image/webp",
                    data=data,
                ))
            else:
                out.append(att)
        except Exception as e:
            logger.warning(f"[ta-mail] 첨부파일 처리 실패 ({ta.company_name}, {att.filename}): {e}")
    return out


async def record_history(**fields) -> bool:
    """발송 이력 저장 (별도 세션). 실패해도 발송 결과에는 영향이 없다."""
    async with AsyncSessionLocal() as db:
        try:
            db.add(EmailHistory(**fields))
            await db.commit()
            return True
        except Exception as e:
            await db.rollback()
            logger.warning(f"[ta-mail] 발송 이력 저장 실패 ({fields.get('ta_email')}): {e}")
            return False


async def send_ta_emails(
    *,
    tas: Sequence[TravelAgent],
    subject: str,
    content: str,
    image_urls: Dict[str, str],
    include_logo: bool,
    attachments: Sequence[MailAttachment],
    sender: User,
    storage: Storage,
    composer: ImageComposer,
) -> List[Dict]:
    """TA별 순차 발송. 성공 건은 EmailHistory 에 남긴다."""
    sender_id, sender_email = str(sender.id), sender.email
    results: List[Dict] = []
    for ta in tas:
        ta_id, company_name, ta_email = str(ta.id), ta.company_name, ta.email
        try:
            files = await _attachments_for(
                ta, attachments, image_urls.get(ta_id), include_logo, storage, composer,
            )
            message_id = await send_email(
                ta_email,
                subject,
                _compose_body(content, sender_email, company_name),
                attachments=files,
                reply_to=sender_email,
            )
        except Exception as e:
            logger.exception(f"[ta-mail] TA {company_name}에게 이메일 발송 실패: {e}")
            results.append({
                "ta_id": ta_id,
                "company_name": company_name,
                "email": ta_email,
                "success": False,
                "error": str(e) or "알 수 없는 오류",
            })
            continue

        await record_history(
            ta_id=ta_id,
            ta_email=ta_email,
            subject=subject,
            content=content,
            sent_by=sender_id,
            sent_by_email=sender_email,
            attachments=[
                {"filename": f.filename, "contentType": f.content_type, "size": len(f.data)}
                for f in files
            ],
            include_logo=include_logo,
            message_id=message_id,
            delivery_status="sent",
            read_status="unknown",
        )
        results.append({
            "ta_id": ta_id,
            "company_name": company_name,
            "email": ta_email,
            "success": True,
            "message_id": message_id,
        })
    return results


def cleanup_session(storage: Storage, session_id: str) -> Tuple[List[str], List[str]]:
    """세션 폴더의 모든 파일 삭제. (삭제된 키, 실패한 키)"""
    deleted: List[str] = []
    failed: List[str] = []
    for key in storage.list_prefix(f"{SESSION_PREFIX}/{session_id}/"):
        try:
            storage.delete(key)
            deleted.append(key)
        except Exception as e:
            logger.warning(f"[ta-mail] 세션 파일 삭제 실패: {key} ({e})")
            failed.append(key)
    return deleted, failed
