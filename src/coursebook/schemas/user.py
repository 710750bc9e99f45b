"""Pydantic schemas for users.

Wire names are camelCase (firstName, emailAddress); Python attributes stay
snake_case to line up with the ORM columns.
"""

from typing import Optional

from pydantic import AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UserCreate(BaseModel):
    """Registration payload.

    Every field is optional at the type level so that missing values reach
    services.validation, which reports them all at once in field order.
    """

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
    )

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_address: Optional[str] = None
    password: Optional[str] = None


class CurrentUserRead(BaseModel):
    """GET /users response: the authenticated user, flattened."""
    id: int
    name: str
    email: str


class OwnerSummary(BaseModel):
    """Owner block nested in course payloads."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: int
    first_name: str
    last_name: str
    email_address: str
