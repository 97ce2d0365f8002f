# app/services/auth.py
"""
Credential check for dashboard logins.

`authenticate` answers one question, "who is this?", and collapses every
business failure (bad shape, unknown email, wrong password) into None so
callers cannot tell them apart. Issuing the session is the web layer's job.
"""

import asyncio
import logging
from typing import Optional

import bcrypt
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine

from app.db.schema import users
from app.models.users import LoginCredentials, SessionUser
from app.services.data import database_errors

logger = logging.getLogger(__name__)

# Compared against when the email is unknown, so both paths pay for one bcrypt check
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=10))


def hash_password(plaintext: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def check_password(plaintext: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password is not a valid bcrypt hash")
        return False


class Authenticator:
    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    async def get_user(self, email: str):
        async with database_errors("Failed to fetch user."):
            async with self.engine.connect() as conn:
                stmt = select(
                    users.c.id, users.c.name, users.c.email, users.c.password
                ).where(users.c.email == email)
                return (await conn.execute(stmt)).mappings().first()

    async def authenticate(self, email: str, password: str) -> Optional[SessionUser]:
        """
        Return the user for valid credentials, None otherwise.

        Raises DataAccessError only when the user lookup itself fails.
        """
        try:
            LoginCredentials(email=email, password=password)
        except ValidationError:
            logger.debug("Rejected malformed credentials")
            return None

        user = await self.get_user(email)
        hashed = user["password"] if user is not None else _DUMMY_HASH.decode("ascii")

        matches = await asyncio.to_thread(check_password, password, hashed)
        if user is None or not matches:
            logger.info("Invalid credentials for login attempt")
            return None

        return SessionUser(id=user["id"], name=user["name"], email=user["email"])
