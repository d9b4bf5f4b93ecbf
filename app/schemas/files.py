"""
파일 업로드/삭제 관련 Pydantic 스키마
"""

from pydantic import Field
from typing import List

from app.schemas.common import CamelModel


class UploadResponse(CamelModel):
    url: str
    file_name: str
    original_name: str


class DeleteFileRequest(CamelModel):
    url: str = ""


class FileCleanupRequest(CamelModel):
    file_names: List[str] = Field(default_factory=list)
    thumbnail_file_names: List[str] = Field(default_factory=list)


class FileCleanupResponse(CamelModel):
    success: bool
    message: str
    deleted: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
