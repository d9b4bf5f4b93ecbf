"""
파일 업로드 API
"""
from fastapi import APIRouter, UploadFile, File, Form, HTTPException, Depends
from typing import List, Optional
import logging

from app.core.config import settings
from app.core.i18n import get_lang, t
from app.core.security import get_current_active_user
from app.dependencies import get_storage_backend
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.files import DeleteFileRequest, FileCleanupRequest, FileCleanupResponse, UploadResponse
from app.services.storage import Storage, build_key

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    folder: str = Form("uploads"),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """
    파일 하나를 <folder>/<ms>_<파일명> 으로 저장하고 공개 URL을 반환합니다.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail=t("no_file", lang))

    data = await file.read()
    await file.close()
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=400,
            detail=t("file_too_large", lang, limit=settings.MAX_UPLOAD_BYTES // (1024 * 1024)),
        )

    key = build_key(folder, file.filename)
    try:
        url = storage.save_bytes(data, content_type=file.content_type, key=key)
    except Exception as e:
        logger.exception(f"[files] upload failed: {e}")
        raise HTTPException(status_code=500, detail=t("upload_failed", lang))

    return UploadResponse(url=url, file_name=key, original_name=file.filename)


@router.post("/delete", response_model=MessageResponse)
async def delete_file(
    payload: DeleteFileRequest,
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """우리 스토리지의 URL만 삭제"""
    key = storage.key_from_url(payload.url)
    if not key:
        raise HTTPException(status_code=400, detail=t("invalid_storage_url", lang))
    try:
        storage.delete(key)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=t("not_found", lang, name="file"))
    except Exception as e:
        logger.exception(f"[files] delete failed: {key} ({e})")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="file"))
    return MessageResponse(message=t("files_deleted", lang, count=1))


@router.post("/cleanup", response_model=FileCleanupResponse)
async def cleanup_files(
    payload: FileCleanupRequest,
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """임시 파일(이미지 + 썸네일) 일괄 삭제. 개별 실패는 failed 로 보고"""
    keys: List[str] = [k for k in payload.file_names + payload.thumbnail_file_names if k]
    if not keys:
        raise HTTPException(status_code=400, detail=t("file_list_required", lang))

    deleted: List[str] = []
    failed: List[str] = []
    for key in dict.fromkeys(keys):
        try:
            storage.delete(key)
            deleted.append(key)
        except Exception as e:
            logger.warning(f"[files] 파일 삭제 실패: {key} ({e})")
            failed.append(key)

    message = t("files_deleted", lang, count=len(deleted))
    if failed:
        message += t("files_failed_suffix", lang, count=len(failed))
    return FileCleanupResponse(success=True, message=message, deleted=deleted, failed=failed)
