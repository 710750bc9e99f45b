"""The Authenticator: HTTP Basic credentials → CurrentIdentity.

Used as Depends(get_current_user) on protected routes. One pass per
request: the resolved identity is attached to request.state and handed
to the handler, which never re-parses the Authorization header.

Failure kinds (all answered with the same 401 body, logged separately):
- MissingCredentials: no Basic header, or one that doesn't decode
- UnknownIdentifier:  no user with that email address
- InvalidSecret:      password doesn't match the stored hash
"""

import base64
from typing import Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from coursebook.auth.password import burn_verification, verify_password
from coursebook.db.engine import get_db
from coursebook.db.models import User
from coursebook.errors import InvalidSecret, MissingCredentials, UnknownIdentifier

logger = structlog.get_logger()


class UTF8HTTPBasic(HTTPBasic):
    """HTTPBasic that decodes the credential pair as UTF-8.

    FastAPI's HTTPBasic decodes as ASCII, which would lock out anyone who
    registered with a non-ASCII email or password. Garbled headers (bad
    base64, bad UTF-8, no colon) come back as None, same as no header.
    """

    async def __call__(self, request: Request) -> Optional[HTTPBasicCredentials]:
        authorization = request.headers.get("Authorization")
        scheme, param = get_authorization_scheme_param(authorization)
        if not authorization or scheme.lower() != "basic":
            return None
        try:
            decoded = base64.b64decode(param, validate=True).decode("utf-8")
        except ValueError:
            logger.info("auth.malformed_header")
            return None

        username, separator, password = decoded.partition(":")
        if not separator:
            logger.info("auth.malformed_header")
            return None
        return HTTPBasicCredentials(username=username, password=password)


_basic = UTF8HTTPBasic(auto_error=False)


class CurrentIdentity:
    """The authenticated user making the request.

    A plain snapshot of the user row, safe to pass around after the
    session closes. Carries no password material.
    """

    def __init__(
        self,
        user_id: int,
        first_name: str,
        last_name: str,
        email_address: str,
    ):
        self.user_id = user_id
        self.first_name = first_name
        self.last_name = last_name
        self.email_address = email_address

    @classmethod
    def from_user(cls, user: User) -> "CurrentIdentity":
        return cls(
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email_address=user.email_address,
        )

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def owns(self, owner_id: int) -> bool:
        return self.user_id == owner_id


class Authenticator:
    """Verifies a Basic credential pair against the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate(
        self, credentials: Optional[HTTPBasicCredentials]
    ) -> CurrentIdentity:
        if credentials is None:
            logger.warning("auth.missing_credentials")
            raise MissingCredentials()

        email = credentials.username
        # Exact, case-sensitive match on the login identifier
        result = await self.db.execute(
            select(User).where(User.email_address == email)
        )
        user = result.scalars().first()

        if user is None:
            await run_in_threadpool(burn_verification)
            logger.warning("auth.unknown_identifier", email=email)
            raise UnknownIdentifier(email)

        # bcrypt is CPU-bound; keep it off the event loop
        matches = await run_in_threadpool(
            verify_password, credentials.password, user.password_hash
        )
        if not matches:
            logger.warning("auth.invalid_secret", email=email, user_id=user.id)
            raise InvalidSecret(email)

        logger.debug("auth.success", user_id=user.id)
        return CurrentIdentity.from_user(user)


async def read_basic_credentials(request: Request) -> Optional[HTTPBasicCredentials]:
    """Parse the Basic Authorization header, or None if absent/garbled."""
    return await _basic(request)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(read_basic_credentials),
    db: AsyncSession = Depends(get_db),
) -> CurrentIdentity:
    """Authenticate the request (required: 401 if it fails)."""
    identity = await Authenticator(db).authenticate(credentials)
    request.state.identity = identity
    return identity
