"""Courses API tests: reads, creation, and owner-only updates/deletes.

Pattern: test_<verb>_<noun>_<scenario>
"""

import pytest
from sqlalchemy import select

from coursebook.db.models import Course
from conftest import basic_auth, create_course


def auth_for(user: dict) -> dict:
    return basic_auth(user["emailAddress"], user["password"])


# ═══════════════════════════════════════════════════════════
# End to end
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_create_and_read_course(client):
    """Register → create course → read it back with its owner."""
    r = await client.post(
        "/api/users",
        json={
            "firstName": "Jo",
            "lastName": "Doe",
            "emailAddress": "jo@example.com",
            "password": "secretpw",
        },
    )
    assert r.status_code == 201
    assert r.headers["Location"] == "/"

    r = await client.post(
        "/api/courses",
        json={"title": "Intro", "description": "Basics"},
        headers=basic_auth("jo@example.com", "secretpw"),
    )
    assert r.status_code == 201
    assert r.content == b""
    location = r.headers["Location"]
    assert location.startswith("/courses/")
    course_id = int(location.rsplit("/", 1)[1])

    r = await client.get(f"/api/courses/{course_id}")
    assert r.status_code == 200
    course = r.json()
    assert course["id"] == course_id
    assert course["title"] == "Intro"
    assert course["description"] == "Basics"
    assert course["estimatedTime"] is None
    assert course["materialsNeeded"] is None

    me = (await client.get("/api/users", headers=basic_auth("jo@example.com", "secretpw"))).json()
    assert course["User"] == {
        "id": me["id"],
        "firstName": "Jo",
        "lastName": "Doe",
        "emailAddress": "jo@example.com",
    }


# ═══════════════════════════════════════════════════════════
# Reads
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_courses_empty(client):
    r = await client.get("/api/courses")
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_list_courses_with_owners(client, jo, sam):
    first = await create_course(client, jo, title="Python", estimatedTime="6 hours")
    second = await create_course(client, sam, title="SQL", materialsNeeded="Laptop")

    r = await client.get("/api/courses")
    assert r.status_code == 200
    courses = r.json()
    assert [c["id"] for c in courses] == [first, second]
    assert courses[0]["estimatedTime"] == "6 hours"
    assert courses[0]["User"]["emailAddress"] == "jo@example.com"
    assert courses[1]["materialsNeeded"] == "Laptop"
    assert courses[1]["User"]["firstName"] == "Sam"
    for course in courses:
        assert set(course["User"]) == {"id", "firstName", "lastName", "emailAddress"}
        assert "password" not in str(course)


@pytest.mark.asyncio
async def test_get_course_not_found(client):
    r = await client.get("/api/courses/999")
    assert r.status_code == 404
    assert r.json() == {"message": "Course not found"}


@pytest.mark.asyncio
async def test_get_course_non_integer_id(client):
    r = await client.get("/api/courses/abc")
    assert r.status_code == 400
    assert "errors" in r.json()


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_course_requires_auth(client):
    r = await client.post("/api/courses", json={"title": "T", "description": "D"})
    assert r.status_code == 401
    assert r.json() == {"message": "Access Denied"}


@pytest.mark.asyncio
async def test_create_course_validation(client, jo):
    r = await client.post("/api/courses", json={}, headers=auth_for(jo))
    assert r.status_code == 400
    assert r.json() == {
        "errors": [
            'Please provide a value for "title"',
            'Please provide a value for "description"',
        ]
    }


@pytest.mark.asyncio
async def test_create_course_validation_runs_before_auth(client):
    """A bad payload is a 400 even without credentials."""
    r = await client.post("/api/courses", json={"title": "Only a title"})
    assert r.status_code == 400
    assert r.json() == {"errors": ['Please provide a value for "description"']}


@pytest.mark.asyncio
async def test_create_course_owner_comes_from_credentials(client, db_session, jo, sam):
    """An ownerId in the body can't assign the course to someone else."""
    sam_id = (await client.get("/api/users", headers=auth_for(sam))).json()["id"]
    jo_id = (await client.get("/api/users", headers=auth_for(jo))).json()["id"]

    course_id = await create_course(client, jo, ownerId=sam_id, userId=sam_id)

    course = await db_session.get(Course, course_id)
    assert course.owner_id == jo_id


# ═══════════════════════════════════════════════════════════
# Update
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_course_by_owner(client, jo):
    course_id = await create_course(client, jo, estimatedTime="2 hours")

    r = await client.put(
        f"/api/courses/{course_id}",
        json={"title": "Intro II", "description": "More basics"},
        headers=auth_for(jo),
    )
    assert r.status_code == 204
    assert r.content == b""

    course = (await client.get(f"/api/courses/{course_id}")).json()
    assert course["title"] == "Intro II"
    assert course["description"] == "More basics"
    # Optional fields not sent are left alone
    assert course["estimatedTime"] == "2 hours"


@pytest.mark.asyncio
async def test_update_course_optional_fields(client, jo):
    course_id = await create_course(client, jo)

    r = await client.put(
        f"/api/courses/{course_id}",
        json={
            "title": "Intro",
            "description": "Basics",
            "estimatedTime": "1 hour",
            "materialsNeeded": "Notebook",
        },
        headers=auth_for(jo),
    )
    assert r.status_code == 204

    course = (await client.get(f"/api/courses/{course_id}")).json()
    assert course["estimatedTime"] == "1 hour"
    assert course["materialsNeeded"] == "Notebook"


@pytest.mark.asyncio
async def test_update_course_by_other_user_forbidden(client, jo, sam):
    """User B can't edit user A's course; the record is untouched."""
    course_id = await create_course(client, jo)
    before = (await client.get(f"/api/courses/{course_id}")).json()

    r = await client.put(
        f"/api/courses/{course_id}",
        json={"title": "Hijacked", "description": "Nope"},
        headers=auth_for(sam),
    )
    assert r.status_code == 403
    assert r.json() == {"error": "Not the correct user"}

    after = (await client.get(f"/api/courses/{course_id}")).json()
    assert after == before


@pytest.mark.asyncio
async def test_update_course_validation(client, jo):
    course_id = await create_course(client, jo)
    r = await client.put(
        f"/api/courses/{course_id}",
        json={"title": "", "description": "Still here"},
        headers=auth_for(jo),
    )
    assert r.status_code == 400
    assert r.json() == {"errors": ['Please provide a value for "title"']}


@pytest.mark.asyncio
async def test_update_course_requires_auth(client, jo):
    course_id = await create_course(client, jo)
    r = await client.put(
        f"/api/courses/{course_id}",
        json={"title": "T", "description": "D"},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_update_course_not_found(client, jo):
    r = await client.put(
        "/api/courses/999",
        json={"title": "T", "description": "D"},
        headers=auth_for(jo),
    )
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_course_by_owner(client, jo):
    course_id = await create_course(client, jo)

    r = await client.delete(f"/api/courses/{course_id}", headers=auth_for(jo))
    assert r.status_code == 204
    assert r.content == b""

    r = await client.get(f"/api/courses/{course_id}")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_course_by_other_user_forbidden(client, db_session, jo, sam):
    course_id = await create_course(client, jo)

    r = await client.delete(f"/api/courses/{course_id}", headers=auth_for(sam))
    assert r.status_code == 403
    assert r.json() == {"error": "Not the correct user"}

    result = await db_session.execute(select(Course).where(Course.id == course_id))
    assert result.scalars().first() is not None


@pytest.mark.asyncio
async def test_delete_course_requires_auth(client, jo):
    course_id = await create_course(client, jo)
    r = await client.delete(f"/api/courses/{course_id}")
    assert r.status_code == 401
    assert r.json() == {"message": "Access Denied"}


@pytest.mark.asyncio
async def test_delete_course_not_found(client, jo):
    r = await client.delete("/api/courses/999", headers=auth_for(jo))
    assert r.status_code == 404
    assert r.json() == {"message": "Course not found"}


@pytest.mark.asyncio
async def test_create_and_update_course_with_long_text(client, jo):
    """Text fields are unbounded; long values are stored, not a server error."""
    course_id = await create_course(
        client, jo, title="T" * 300, estimatedTime="E" * 300
    )
    course = (await client.get(f"/api/courses/{course_id}")).json()
    assert course["title"] == "T" * 300
    assert course["estimatedTime"] == "E" * 300

    r = await client.put(
        f"/api/courses/{course_id}",
        json={"title": "U" * 500, "description": "D" * 5000},
        headers=auth_for(jo),
    )
    assert r.status_code == 204


def test_course_and_user_text_columns_are_unbounded():
    from sqlalchemy import Text

    from coursebook.db.models import User

    for column in (
        Course.__table__.c.title,
        Course.__table__.c.description,
        Course.__table__.c.estimated_time,
        Course.__table__.c.materials_needed,
        User.__table__.c.first_name,
        User.__table__.c.last_name,
    ):
        assert isinstance(column.type, Text), column.name
