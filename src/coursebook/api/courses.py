"""Courses API.

Reads are open; writes need Basic credentials and, for existing courses,
ownership. Every write route declares course_payload before
get_current_user: the payload is checked before credentials are looked up.

- GET    /courses      → all courses with owner summaries
- GET    /courses/{id} → one course, 404 if missing
- POST   /courses      → 201, Location: /courses/{id}
- PUT    /courses/{id} → 204 (owner only)
- DELETE /courses/{id} → 204 (owner only)
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from coursebook.auth.dependencies import CurrentIdentity, get_current_user
from coursebook.db.engine import get_db
from coursebook.schemas.course import CourseInput, CourseRead
from coursebook.services.course_service import CourseService
from coursebook.services.validation import course_payload

router = APIRouter(prefix="/courses")


def _svc(db: AsyncSession = Depends(get_db)) -> CourseService:
    return CourseService(db)


@router.get("", response_model=list[CourseRead])
async def list_courses(svc: CourseService = Depends(_svc)):
    return await svc.list_courses()


@router.get("/{course_id}", response_model=CourseRead)
async def get_course(course_id: int, svc: CourseService = Depends(_svc)):
    return await svc.get_course(course_id)


@router.post("", status_code=201, response_class=Response)
async def create_course(
    payload: CourseInput = Depends(course_payload),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CourseService = Depends(_svc),
):
    course = await svc.create_course(identity, payload)
    return Response(status_code=201, headers={"Location": f"/courses/{course.id}"})


@router.put("/{course_id}", status_code=204, response_class=Response)
async def update_course(
    course_id: int,
    payload: CourseInput = Depends(course_payload),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CourseService = Depends(_svc),
):
    await svc.update_course(identity, course_id, payload)
    return Response(status_code=204)


@router.delete("/{course_id}", status_code=204, response_class=Response)
async def delete_course(
    course_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CourseService = Depends(_svc),
):
    await svc.delete_course(identity, course_id)
    return Response(status_code=204)
