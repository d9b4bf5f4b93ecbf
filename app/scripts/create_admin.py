"""
관리자 계정 생성/승격 스크립트

회원가입 API가 없으므로 첫 관리자는 이 스크립트로 만든다.
이미 있는 이메일이면 role 을 admin 으로 바꾸고, --password 를 주면 비밀번호도 재설정한다.

사용: python -m app.scripts.create_admin --email admin@cdc-travel.com --password '...'
"""
import argparse
import asyncio
import sys
from typing import Optional

from app.core.database import AsyncSessionLocal, create_all_tables
from app.core.security import get_password_hash
from app.services.user_service import create_user, get_user_by_email


async def create_admin(email: str, password: Optional[str], display_name: Optional[str]) -> int:
    await create_all_tables()
    async with AsyncSessionLocal() as db:
        user = await get_user_by_email(db, email)
        if user is None:
            if not password:
                print("❌ 새 계정을 만들려면 --password 가 필요합니다.")
                return 1
            user = await create_user(
                db,
                email=email,
                password_hash=get_password_hash(password),
                display_name=display_name,
                role="admin",
            )
            print(f"✅ 관리자 계정을 만들었습니다: {user.email} ({user.id})")
            return 0

        user.role = "admin"
        user.disabled = False
        if password:
            user.hashed_password = get_password_hash(password)
        await db.commit()
        print(f"✅ {user.email} 을(를) 관리자로 설정했습니다. (User ID: {user.id})")
        return 0


def main() -> None:
    p = argparse.ArgumentParser(description="관리자 계정 생성/승격")
    p.add_argument("--email", required=True, help="관리자 이메일")
    p.add_argument("--password", help="비밀번호 (새 계정이면 필수)")
    p.add_argument("--name", help="표시 이름")
    args = p.parse_args()
    sys.exit(asyncio.run(create_admin(args.email, args.password, args.name)))


if __name__ == "__main__":
    main()
