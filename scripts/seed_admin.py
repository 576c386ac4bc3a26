"""
Seed Admin User

Creates an admin user for the admissions system, or promotes an existing
user to admin. The uid must match the phone-verification provider's uid
for the person, so they can sign in with their phone.

Usage:
    python scripts/seed_admin.py <uid> [--phone +919876543210] [--name "Admissions Office"]
"""

import argparse
import asyncio

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from admissions.core.database import async_database_url
from admissions.modules.users.models import User, UserRole
from admissions.modules.users.repository import UserRepository


async def seed_admin(uid: str, phone_number: str | None, display_name: str | None) -> None:
    """Create the admin user if it doesn't exist, otherwise promote it."""
    engine = create_async_engine(async_database_url(), echo=False)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as db:
        existing_user: User | None = await UserRepository.get_by_uid(db, uid)

        if existing_user:
            if existing_user.role == UserRole.ADMIN:
                print(f"Admin already exists: {uid}")
            else:
                existing_user.role = UserRole.ADMIN
                await db.commit()
                print(f"Promoted existing user to admin: {uid}")
            print(f"  ID: {existing_user.id}")
            print(f"  Role: {existing_user.role.value}")
        else:
            admin_user = await UserRepository.create(
                db,
                uid=uid,
                role=UserRole.ADMIN,
                phone_number=phone_number,
                display_name=display_name,
            )
            await db.commit()

            print("Admin created successfully!")
            print(f"  UID: {uid}")
            print(f"  Phone: {phone_number or '-'}")
            print(f"  ID: {admin_user.id}")
            print(f"  Role: {admin_user.role.value}")

    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or promote an admin user")
    parser.add_argument("uid", help="Identity provider uid")
    parser.add_argument("--phone", dest="phone_number", default=None)
    parser.add_argument("--name", dest="display_name", default=None)
    args = parser.parse_args()

    asyncio.run(seed_admin(args.uid, args.phone_number, args.display_name))


if __name__ == "__main__":
    main()
