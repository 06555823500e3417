"""
Create (or promote) an admin account.

    python -m app.create_admin

Admins cannot sign up through the OTP flow, which always creates role "user".
"""

import asyncio
import getpass
import logging
import sys

from app.database import close_mongo_connection, connect_to_mongo
from app.dependencies import get_password_hasher, get_user_repository
from app.schemas import MIN_PASSWORD_LENGTH
from app.services.user_service import create_admin

logger = logging.getLogger(__name__)


async def main() -> int:
    email = input("Admin email: ").strip()
    password = getpass.getpass("Password (hidden): ").strip()
    if not email or len(password) < MIN_PASSWORD_LENGTH:
        print(f"Email is required and the password needs at least {MIN_PASSWORD_LENGTH} characters.")
        return 1

    await connect_to_mongo()
    try:
        user = await create_admin(get_user_repository(), get_password_hasher(), email, password)
    finally:
        await close_mongo_connection()

    print(f"Admin ready: {user.email} (id {user.id})")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    sys.exit(asyncio.run(main()))
