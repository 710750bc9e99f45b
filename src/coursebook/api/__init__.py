"""API route aggregation.

All routers registered here get mounted under settings.api_prefix in
main.py. Authentication is per-route (Depends(get_current_user)) rather
than per-router: reads on /courses are open while writes are not, and
write routes need payload validation to run before authentication.
"""

from fastapi import APIRouter

from coursebook.api.courses import router as courses_router
from coursebook.api.health import router as health_router
from coursebook.api.users import router as users_router
from coursebook.config import settings

api_router = APIRouter(prefix=settings.api_prefix)

api_router.include_router(health_router, tags=["health"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(courses_router, tags=["courses"])
