"""Create a staff user, or reset the password and role of an existing one.

Usage: python scripts/create_user.py USERNAME PASSWORD [--role admin|reception|cashier] [--name "Full Name"]
"""
import argparse
import asyncio

from sqlalchemy import select

from gymdesk.core.permissions import parse_role
from gymdesk.core.security import hash_password
from gymdesk.db.engine import async_session_factory, engine
from gymdesk.models.user import User


async def create_user(username: str, password: str, role_name: str, full_name: str | None):
    role = parse_role(role_name)
    if role is None:
        print(f"Unknown role '{role_name}'")
        return

    async with async_session_factory() as db:
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user:
            user.hashed_password = hash_password(password)
            user.role = role
            user.is_active = True
            if full_name:
                user.full_name = full_name
            print(f"Updated user {username} ({role.value})")
        else:
            db.add(User(
                username=username,
                full_name=full_name or username,
                role=role,
                hashed_password=hash_password(password),
                is_active=True,
            ))
            print(f"Created user {username} ({role.value})")
        await db.commit()
    await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Create or reset a staff user")
    parser.add_argument("username")
    parser.add_argument("password")
    parser.add_argument("--role", default="reception")
    parser.add_argument("--name", default=None)
    args = parser.parse_args()
    asyncio.run(create_user(args.username, args.password, args.role, args.name))


if __name__ == "__main__":
    main()
