"""
테스트 공통 픽스처

앱 임포트 전에 임시 SQLite DB/업로드 디렉토리를 환경변수로 지정한다.
"""

import asyncio
import os
import shutil
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="cdc-travel-test-")
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIRECTORY"] = os.path.join(_TMP_DIR, "uploads")
os.environ["STORAGE_BACKEND"] = "local"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_EMAILS"] = "owner@cdc-travel.com"
os.environ.pop("SMTP_HOST", None)

import pytest
from fastapi.testclient import TestClient

from app.core.database import AsyncSessionLocal, create_all_tables, drop_all_tables
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.services import user_service
from app.services.storage import get_storage

ADMIN_PASSWORD = "admin-pass-123"
STAFF_PASSWORD = "staff-pass-123"


def run(coro):
    return asyncio.run(coro)


async def _create_user(email: str, password: str, role: str, team=None):
    async with AsyncSessionLocal() as db:
        return await user_service.create_user(
            db, email, get_password_hash(password), display_name=email.split("@")[0], role=role, team=team,
        )


@pytest.fixture(autouse=True)
def fresh_db():
    shutil.rmtree(os.environ["UPLOAD_DIRECTORY"], ignore_errors=True)
    run(drop_all_tables())
    run(create_all_tables())
    yield


@pytest.fixture
def storage():
    return get_storage()


@pytest.fixture
def admin_user():
    return run(_create_user("admin@cdc-travel.com", ADMIN_PASSWORD, "admin"))


@pytest.fixture
def staff_user():
    return run(_create_user("staff@cdc-travel.com", STAFF_PASSWORD, "user", team="AIR"))


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client, admin_user):
    client.headers.update(auth_headers(admin_user))
    return client


@pytest.fixture
def staff_client(client, staff_user):
    client.headers.update(auth_headers(staff_user))
    return client
