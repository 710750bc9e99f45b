"""Course service: reads for everyone, owner-only writes.

Mutations go through OwnershipGuard (NotFound, then Forbidden) and then
a conditional UPDATE/DELETE that repeats the owner predicate. If the row
changed hands or vanished between the check and the write, the statement
touches nothing and the call fails with NotFound instead of writing.
"""

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from coursebook.auth.dependencies import CurrentIdentity
from coursebook.auth.guard import OwnershipGuard
from coursebook.db.models import Course
from coursebook.errors import NotFound
from coursebook.schemas.course import CourseInput

logger = structlog.get_logger()


class CourseService:
    """Business logic for courses."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.guard = OwnershipGuard(db)

    # ─── Reads ──────────────────────────────────────────

    async def list_courses(self) -> list[Course]:
        result = await self.db.execute(
            select(Course).options(selectinload(Course.owner)).order_by(Course.id)
        )
        return list(result.scalars().all())

    async def get_course(self, course_id: int) -> Course:
        result = await self.db.execute(
            select(Course)
            .where(Course.id == course_id)
            .options(selectinload(Course.owner))
        )
        course = result.scalars().first()
        if course is None:
            raise NotFound()
        return course

    # ─── Writes ─────────────────────────────────────────

    async def create_course(
        self, owner: CurrentIdentity, payload: CourseInput
    ) -> Course:
        course = Course(owner_id=owner.user_id, **payload.column_values())
        self.db.add(course)
        await self.db.commit()
        logger.info("course.created", course_id=course.id, owner_id=owner.user_id)
        return course

    async def update_course(
        self, identity: CurrentIdentity, course_id: int, payload: CourseInput
    ) -> None:
        await self.guard.authorize(identity, course_id)

        result = await self.db.execute(
            update(Course)
            .where(Course.id == course_id, Course.owner_id == identity.user_id)
            .values(**payload.column_values(partial=True))
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFound()
        await self.db.commit()
        logger.info("course.updated", course_id=course_id, owner_id=identity.user_id)

    async def delete_course(self, identity: CurrentIdentity, course_id: int) -> None:
        await self.guard.authorize(identity, course_id)

        result = await self.db.execute(
            delete(Course).where(
                Course.id == course_id, Course.owner_id == identity.user_id
            )
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFound()
        await self.db.commit()
        logger.info("course.deleted", course_id=course_id, owner_id=identity.user_id)
