"""Users API.

- GET  /users → the authenticated user as {id, name, email}
- POST /users → register; 201 with Location: / and no body
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from coursebook.auth.dependencies import CurrentIdentity, get_current_user
from coursebook.db.engine import get_db
from coursebook.schemas.user import CurrentUserRead, UserCreate
from coursebook.services.user_service import UserService
from coursebook.services.validation import user_payload

router = APIRouter(prefix="/users")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("", response_model=CurrentUserRead)
async def get_me(identity: CurrentIdentity = Depends(get_current_user)):
    """Return the user the request authenticated as."""
    return CurrentUserRead(
        id=identity.user_id,
        name=identity.name,
        email=identity.email_address,
    )


@router.post("", status_code=201, response_class=Response)
async def register(
    payload: UserCreate = Depends(user_payload),
    svc: UserService = Depends(_svc),
):
    await svc.register(payload)
    return Response(status_code=201, headers={"Location": "/"})
