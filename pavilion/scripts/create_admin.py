import argparse
import asyncio
import getpass

from sqlalchemy.future import select

from pavilion.models.user_models import User
from pavilion.core.db import AsyncSessionLocal, init_models
from pavilion.core.security import hash_password


async def create_admin(email: str, password: str, name: str = "Administrator", role: str = "superadmin"):
    await init_models()
    async with AsyncSessionLocal() as session:
        existing = await session.execute(select(User).where(User.email == email.lower()))
        if existing.scalars().first():
            print(f"User {email} already exists")
            return
        admin = User(
            email=email.lower(),
            name=name,
            password_hash=hash_password(password),
            role=role,
            is_active=True
        )
        session.add(admin)
        await session.commit()
        print(f"{role} user {email} created!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a back-office admin user")
    parser.add_argument("email")
    parser.add_argument("--name", default="Administrator")
    parser.add_argument("--role", choices=["superadmin", "admin"], default="superadmin")
    args = parser.parse_args()
    asyncio.run(create_admin(args.email, getpass.getpass("Password: "), args.name, args.role))
