"""Authorization guard for course mutations.

Only a course's owner may update or delete it. The guard resolves the
target first (NotFound beats Forbidden: there's nothing to authorize
against a course that doesn't exist), then compares owner ids.

The guard alone leaves a window between the check and the write, so
CourseService pairs it with conditional statements that repeat the
owner predicate (UPDATE/DELETE ... WHERE id = ? AND owner_id = ?).
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from coursebook.auth.dependencies import CurrentIdentity
from coursebook.db.models import Course
from coursebook.errors import Forbidden, NotFound

logger = structlog.get_logger()


class OwnershipGuard:
    """Resolves a course and checks it belongs to the caller.

    Learn: raised errors map straight to 404/403 via errors.py, so
    callers only deal with the happy path.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def authorize(self, identity: CurrentIdentity, course_id: int) -> Course:
        """Return the course if ``identity`` owns it.

        Raises NotFound for a missing course, Forbidden for someone else's.
        """
        course = await self.db.get(Course, course_id)
        if course is None:
            raise NotFound()

        if not identity.owns(course.owner_id):
            logger.warning(
                "auth.forbidden",
                user_id=identity.user_id,
                course_id=course_id,
                owner_id=course.owner_id,
            )
            raise Forbidden()
        return course
