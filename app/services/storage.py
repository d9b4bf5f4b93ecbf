import logging
import os
import re
import time
from typing import List, Optional
from urllib.parse import unquote, urlparse


logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def safe_name(name: str, pattern: str = r"[^\w.\-]") -> str:
    """경로 구분자/특수문자를 '_' 로 치환한 파일명"""
    base = os.path.basename((name or "").replace("\\", "/")) or "file"
    return re.sub(pattern, "_", base)


def safe_folder(folder: Optional[str]) -> str:
    parts = [p for p in re.split(r"[\\/]+", folder or "") if p and p not in (".", "..")]
    cleaned = "/".join(re.sub(r"[^\w\-]", "_", p) for p in parts)
    return cleaned or "uploads"


def build_key(folder: Optional[str], filename: str) -> str:
    """<folder>/<ms>_<name> 형식의 저장 키"""
    return f"{safe_folder(folder)}/{now_ms()}_{safe_name(filename)}"


class Storage:
    def save_bytes(self, data: bytes, *, content_type: Optional[str] = None, key: str) -> str:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def list_prefix(self, prefix: str) -> List[str]:
        raise NotImplementedError

    def public_url(self, key: str) -> str:
        raise NotImplementedError

    def key_from_url(self, url: str) -> Optional[str]:
        """이 스토리지가 발급한 URL이면 저장 키를, 아니면 None"""
        raise NotImplementedError

    def read_bytes(self, key: str) -> bytes:
        raise NotImplementedError


def _check_key(key: str) -> str:
    key = (key or "").lstrip("/")
    if not key or any(part in ("", ".", "..") for part in key.split("/")):
        raise ValueError(f"invalid storage key: {key!r}")
    return key


class LocalStorage(Storage):
    def __init__(self, base_dir: str, public_base: str = "/static") -> None:
        self.base_dir = base_dir
        self.public_base = public_base.rstrip("/")
        os.makedirs(self.base_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.base_dir, *_check_key(key).split("/"))

    def save_bytes(self, data: bytes, *, content_type: Optional[str] = None, key: str) -> str:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        return self.public_url(key)

    def read_bytes(self, key: str) -> bytes:
        with open(self._path(key), "rb") as f:
            return f.read()

    def delete(self, key: str) -> None:
        os.remove(self._path(key))

    def list_prefix(self, prefix: str) -> List[str]:
        prefix = prefix.lstrip("/")
        keys: List[str] = []
        for root, _dirs, files in os.walk(self.base_dir):
            for name in files:
                rel = os.path.relpath(os.path.join(root, name), self.base_dir).replace(os.sep, "/")
                if rel.startswith(prefix):
                    keys.append(rel)
        return sorted(keys)

    def public_url(self, key: str) -> str:
        return f"{self.public_base}/{_check_key(key)}"

    def key_from_url(self, url: str) -> Optional[str]:
        if not url:
            return None
        path = unquote(urlparse(url).path or "")
        marker = self.public_base + "/"
        if not path.startswith(marker):
            return None
        key = path[len(marker):]
        try:
            return _check_key(key)
        except ValueError:
            return None


class S3Storage(Storage):
    def __init__(self, *, endpoint_url: str, access_key: str, secret_key: str, bucket: str, region: Optional[str] = None, public_base_url: Optional[str] = None) -> None:
        import boto3
        from botocore.config import Config

        addressing_style = (os.getenv("S3_ADDRESSING_STYLE") or "path").lower()
        cfg = Config(signature_version="s3v4", s3={"addressing_style": addressing_style})
        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=cfg,
        )
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        # Ensure bucket exists or provide actionable error
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except Exception as e:
            if os.getenv("S3_AUTO_CREATE_BUCKET") == "1":
                try:
                    self.client.create_bucket(Bucket=self.bucket)
                except Exception as ce:
                    raise RuntimeError(f"Storage bucket '{self.bucket}' not found and auto-create failed: {ce}")
            else:
                raise RuntimeError(f"Storage bucket '{self.bucket}' not found. Create it and set S3_BUCKET correctly. Original: {e}")

    def _base(self) -> str:
        if self.public_base_url:
            return self.public_base_url
        # 기본 S3 URL (path-style: endpoint/bucket/key)
        endpoint = self.client.meta.endpoint_url.rstrip("/")
        return f"{endpoint}/{self.bucket}"

    def save_bytes(self, data: bytes, *, content_type: Optional[str] = None, key: str) -> str:
        key = _check_key(key)
        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra_args)
        return self.public_url(key)

    def read_bytes(self, key: str) -> bytes:
        obj = self.client.get_object(Bucket=self.bucket, Key=_check_key(key))
        return obj["Body"].read()

    def delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=_check_key(key))

    def list_prefix(self, prefix: str) -> List[str]:
        keys: List[str] = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix.lstrip("/")):
            for item in page.get("Contents", []) or []:
                keys.append(item["Key"])
        return keys

    def public_url(self, key: str) -> str:
        return f"{self._base()}/{_check_key(key)}"

    def key_from_url(self, url: str) -> Optional[str]:
        if not url:
            return None
        # 쿼리스트링(프리사인 등)은 제외하고 비교
        bare = url.split("?", 1)[0]
        marker = self._base() + "/"
        if not bare.startswith(marker):
            return None
        try:
            return _check_key(unquote(bare[len(marker):]))
        except ValueError:
            return None


def get_storage() -> Storage:
    backend = (os.getenv("STORAGE_BACKEND") or "local").lower()
    if backend == "s3":
        endpoint = os.getenv("S3_ENDPOINT_URL")
        access_key = os.getenv("S3_ACCESS_KEY_ID")
        secret_key = os.getenv("S3_SECRET_ACCESS_KEY")
        bucket = os.getenv("S3_BUCKET")
        region = os.getenv("S3_REGION")
        public_base = os.getenv("S3_PUBLIC_BASE_URL")
        if not (endpoint and access_key and secret_key and bucket):
            raise RuntimeError("S3 storage is not fully configured")
        return S3Storage(endpoint_url=endpoint, access_key=access_key, secret_key=secret_key, bucket=bucket, region=region, public_base_url=public_base)
    else:
        # local
        from app.core.paths import get_upload_dir
        base_dir = get_upload_dir()
        return LocalStorage(base_dir=base_dir, public_base="/static")


def delete_quietly(storage: Storage, url_or_key: Optional[str], *, tag: str = "storage") -> bool:
    """URL(또는 키)이 가리키는 객체를 삭제한다. 실패는 경고 로그만 남긴다."""
    if not url_or_key:
        return False
    key = storage.key_from_url(url_or_key) if "://" in url_or_key or url_or_key.startswith("/") else url_or_key
    if not key:
        logger.info(f"[{tag}] 외부 URL은 삭제하지 않음: {url_or_key}")
        return False
    try:
        storage.delete(key)
        return True
    except Exception as e:
        logger.warning(f"[{tag}] 파일 삭제 실패 (무시): {key} ({e})")
        return False
