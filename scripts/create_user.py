"""Create (or reuse) a local user and print a development auth token.

Usage:
    python scripts/create_user.py someone@example.com "Display Name"
"""
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

import asyncio
from taskboard.core.config import settings
from taskboard.core.database import session_manager
from taskboard.core.security import build_token_codec
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.userSchema import Identity


async def create_user(email: str, name: str = None):
    await session_manager.init()
    try:
        async with session_manager.get_session() as db:
            users = UserRepository(db)
            user = await users.get_by_email(email)
            if user:
                print(f"ℹ️ User {email} already exists")
            else:
                user = await users.create(email=email, name=name)
                print(f"✅ Created user {email}")

            token = build_token_codec().issue(Identity(id=user.id, email=user.email))
            print(f"🔑 Set cookie {settings.AUTH_COOKIE_NAME}={token}")
    finally:
        await session_manager.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(create_user(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
