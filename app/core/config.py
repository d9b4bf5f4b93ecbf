"""
애플리케이션 설정
"""

from pydantic_settings import BaseSettings
from typing import Optional, List
from pathlib import Path
from dotenv import load_dotenv


"""env 로딩 우선순위
1) OS 환경변수 (배포 대시보드 Environment 등)
2) 프로젝트 루트의 .env
"""

# .env 사전 로드 (OS 환경변수 우선, override=False)
_here = Path(__file__).resolve()
_root_env = _here.parents[2] / ".env"
if _root_env.exists():
    load_dotenv(dotenv_path=str(_root_env), override=False)


class Settings(BaseSettings):
    """애플리케이션 설정"""
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    DATABASE_URL: str = "sqlite+aiosqlite:///./data/app.db"
    REDIS_URL: str = "redis://localhost:6379/0"

    # JWT
    JWT_SECRET_KEY: str = "your-super-secret-jwt-key-change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # 관리자 이메일 (콤마 구분). users.role == "admin" 과 함께 관리자 판정에 사용
    ADMIN_EMAILS: str = ""

    # 다국어 기본값 (ko|en)
    DEFAULT_LANGUAGE: str = "ko"

    # 이메일/SMTP
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    EMAIL_FROM_ADDRESS: str = "no-reply@cdc-travel.local"
    EMAIL_FROM_NAME: str = "CDC Travel"

    # 업로드 제한
    MAX_POSTER_BYTES: int = 10 * 1024 * 1024
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    # 예약 생성 레이트리밋 (유저당 분당)
    RATE_LIMIT_ENABLED: bool = True
    BOOKING_RATE_LIMIT_PER_MINUTE: int = 30

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore'

    @property
    def admin_email_list(self) -> List[str]:
        return [e.strip().lower() for e in (self.ADMIN_EMAILS or "").split(",") if e.strip()]


settings = Settings()


# 환경별 설정 검증
def validate_settings():
    """설정 검증"""
    if settings.ENVIRONMENT == "production":
        if settings.JWT_SECRET_KEY == "your-super-secret-jwt-key-change-this-in-production":
            raise ValueError("프로덕션 환경에서는 JWT_SECRET_KEY를 변경해야 합니다.")
    if settings.DEFAULT_LANGUAGE not in ("ko", "en"):
        raise ValueError("DEFAULT_LANGUAGE는 ko 또는 en 이어야 합니다.")

    return True


# 설정 검증 실행
validate_settings()
