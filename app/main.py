"""
CDC Travel 백오피스 - FastAPI 메인 애플리케이션
"""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from app.core.config import settings, validate_settings
from app.core.database import check_db_connection, create_all_tables
from app.core.paths import get_upload_dir

from app.api.auth import router as auth_router
from app.api.users import router as users_router
from app.api.banners import router as banners_router
from app.api.spots import router as spots_router
from app.api.include_items import router as include_items_router
from app.api.products import router as products_router
from app.api.bookings import router as bookings_router
from app.api.collaborations import router as collaborations_router
from app.api.posters import router as posters_router
from app.api.travel_agents import router as travel_agents_router
from app.api.ta_emails import router as ta_emails_router
from app.api.files import router as files_router
from app.api.contents import router as contents_router
from app.api.site_settings import router as site_settings_router

# 로깅 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 시작/종료 시 실행되는 이벤트"""
    logger.info("🚀 CDC Travel 백오피스 API 시작")
    validate_settings()

    # 데이터베이스 테이블 생성 (개발용)
    if settings.ENVIRONMENT == "development":
        await create_all_tables()
        logger.info("📊 데이터베이스 테이블 생성 완료")

    yield

    logger.info("👋 CDC Travel 백오피스 API 종료")


app = FastAPI(
    title="CDC Travel 백오피스 API",
    description="여행 상품/스팟/배너/예약/TA 관리",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan
)
UPLOAD_DIR = get_upload_dir()
app.mount("/static", StaticFiles(directory=UPLOAD_DIR), name="static")

# CORS: 개발 환경에선 관리자 프론트 도메인을 명시적으로 허용, 그 외 환경에서도 로컬 호스트는 정규식으로 허용
DEV_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
ALLOWED_ORIGINS = DEV_ALLOWED_ORIGINS if settings.ENVIRONMENT == "development" else []
ALLOWED_ORIGIN_REGEX = None if settings.ENVIRONMENT == "development" else r"https?://(localhost|127\.0\.0\.1)(:\d+)?"
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_origin_regex=ALLOWED_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_router, prefix="/auth", tags=["인증"])
app.include_router(users_router, prefix="/users", tags=["사용자"])
app.include_router(banners_router, prefix="/banners", tags=["배너"])
app.include_router(spots_router, prefix="/spots", tags=["스팟"])
app.include_router(include_items_router, prefix="/include-items", tags=["포함/불포함"])
app.include_router(products_router, prefix="/products", tags=["상품"])
app.include_router(bookings_router, prefix="/bookings", tags=["예약"])
app.include_router(collaborations_router, prefix="/collaborations", tags=["협업 요청"])
app.include_router(posters_router, prefix="/posters", tags=["전단지"])
app.include_router(travel_agents_router, prefix="/tas", tags=["TA"])
app.include_router(ta_emails_router, prefix="/ta-emails", tags=["TA 이메일"])
app.include_router(files_router, prefix="/files", tags=["파일"])
app.include_router(contents_router, prefix="/contents", tags=["여행정보"])
app.include_router(site_settings_router, prefix="/settings", tags=["설정"])


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "message": "CDC Travel 백오피스 API",
        "version": "1.0.0",
        "docs": "/docs",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """헬스 체크 엔드포인트"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "database": "connected" if await check_db_connection() else "unavailable",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True if settings.ENVIRONMENT == "development" else False
    )
