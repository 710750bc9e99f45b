"""Pydantic schemas for courses."""

from typing import Optional

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from coursebook.schemas.user import OwnerSummary


class CourseInput(BaseModel):
    """Create/update payload. Presence rules live in services.validation.

    Unknown keys (including any attempt to set an owner) are ignored.
    """

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
    )

    title: Optional[str] = None
    description: Optional[str] = None
    estimated_time: Optional[str] = None
    materials_needed: Optional[str] = None

    def column_values(self, partial: bool = False) -> dict:
        """Map to Course column values.

        With ``partial``, optional fields absent from the request body are
        left out so an update doesn't clear them.
        """
        if partial:
            return self.model_dump(exclude_unset=True)
        return self.model_dump()


class CourseRead(BaseModel):
    """Course with its owner summary under the "User" key."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    id: int
    title: str
    description: str
    estimated_time: Optional[str] = None
    materials_needed: Optional[str] = None
    owner: OwnerSummary = Field(serialization_alias="User")
