"""User service: registration.

Passwords are hashed before the row is built; the plaintext never reaches
the session or the logs.
"""

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from coursebook.auth.password import hash_password
from coursebook.db.models import User
from coursebook.errors import ValidationFailed
from coursebook.schemas.user import UserCreate
from coursebook.services.validation import EMAIL_TAKEN

logger = structlog.get_logger()


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, payload: UserCreate) -> User:
        """Create a user from an already-validated payload.

        A concurrent registration can still win the race for the email
        address between validation and insert; the unique constraint
        catches it and it's reported like any other validation failure.
        """
        password_hash = await run_in_threadpool(hash_password, payload.password)
        user = User(
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            email_address=payload.email_address.strip(),
            password_hash=password_hash,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("user.duplicate_email", email=payload.email_address)
            raise ValidationFailed([EMAIL_TAKEN])

        logger.info("user.registered", user_id=user.id)
        return user
