"""Payload validation: one layer for every client-input check.

Each check walks its fields in declaration order and collects one message
per bad field, then raises ValidationFailed with the whole list. Type
errors from the pydantic schema, presence rules, email syntax, password
length and email uniqueness all land in the same list. UserService
reuses EMAIL_TAKEN when the unique constraint fires on insert.

user_payload / course_payload are FastAPI dependencies. Routes declare
them before get_current_user, so a bad payload is rejected before any
credential lookup happens.
"""

import json
from typing import Any

from email_validator import EmailNotValidError, validate_email
from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from coursebook.db.engine import get_db
from coursebook.db.models import User
from coursebook.errors import ValidationFailed
from coursebook.schemas.course import CourseInput
from coursebook.schemas.user import UserCreate

REQUIRED = 'Please provide a value for "{field}"'
WRONG_TYPE = 'Please provide a text value for "{field}"'
INVALID_EMAIL = 'Please provide a valid email address for "emailAddress"'
PASSWORD_LENGTH = "Password must be between 8 and 100 characters long"
EMAIL_TAKEN = "The email address you entered is already in use"

PASSWORD_MIN, PASSWORD_MAX = 8, 100

USER_FIELDS = ("firstName", "lastName", "emailAddress", "password")
COURSE_FIELDS = ("title", "description", "estimatedTime", "materialsNeeded")
COURSE_REQUIRED = ("title", "description")


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse(schema: type[BaseModel], data: dict) -> tuple[BaseModel | None, set[str]]:
    """Validate ``data`` against ``schema``; return the model and bad field names."""
    try:
        return schema.model_validate(data), set()
    except ValidationError as exc:
        return None, {str(err["loc"][0]) for err in exc.errors() if err["loc"]}


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


async def email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(
        select(exists().where(User.email_address == email))
    )
    return bool(result.scalar())


async def check_user(data: dict, db: AsyncSession) -> UserCreate:
    """Validate a registration payload or raise ValidationFailed."""
    payload, bad_types = _parse(UserCreate, data)
    messages = []

    for field in USER_FIELDS:
        value = data.get(field)
        if field in bad_types:
            messages.append(WRONG_TYPE.format(field=field))
        elif _blank(value):
            messages.append(REQUIRED.format(field=field))
        elif field == "emailAddress":
            if not is_valid_email(value.strip()):
                messages.append(INVALID_EMAIL)
            elif await email_taken(db, value.strip()):
                messages.append(EMAIL_TAKEN)
        elif field == "password":
            if not PASSWORD_MIN <= len(value) <= PASSWORD_MAX:
                messages.append(PASSWORD_LENGTH)

    if messages:
        raise ValidationFailed(messages)
    return payload


def check_course(data: dict) -> CourseInput:
    """Validate a course create/update payload or raise ValidationFailed."""
    payload, bad_types = _parse(CourseInput, data)
    messages = []

    for field in COURSE_FIELDS:
        if field in bad_types:
            messages.append(WRONG_TYPE.format(field=field))
        elif field in COURSE_REQUIRED and _blank(data.get(field)):
            messages.append(REQUIRED.format(field=field))

    if messages:
        raise ValidationFailed(messages)
    return payload


async def read_json_object(request: Request) -> dict:
    """Decode the request body; an empty body counts as {}."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise ValidationFailed(["Request body must be valid JSON"])
    if not isinstance(data, dict):
        raise ValidationFailed(["Request body must be a JSON object"])
    return data


# ─── FastAPI dependencies ───────────────────────────────


async def user_payload(
    request: Request, db: AsyncSession = Depends(get_db)
) -> UserCreate:
    return await check_user(await read_json_object(request), db)


async def course_payload(request: Request) -> CourseInput:
    return check_course(await read_json_object(request))
