from conftest import run
from app.core.database import AsyncSessionLocal
from app.core.security import verify_password
from app.scripts.create_admin import create_admin
from app.services.user_service import get_user_by_email


def _load(email):
    async def go():
        async with AsyncSessionLocal() as db:
            return await get_user_by_email(db, email)
    return run(go())


def test_creates_new_admin():
    assert run(create_admin("boss@cdc-travel.com", "boss-pass-123", "Boss")) == 0
    user = _load("boss@cdc-travel.com")
    assert user.role == "admin"
    assert verify_password("boss-pass-123", user.hashed_password)


def test_new_account_needs_password():
    assert run(create_admin("nobody@cdc-travel.com", None, None)) == 1
    assert _load("nobody@cdc-travel.com") is None


def test_promotes_existing_user(staff_user):
    assert run(create_admin("staff@cdc-travel.com", None, None)) == 0
    assert _load("staff@cdc-travel.com").role == "admin"
