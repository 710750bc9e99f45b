"""Coursebook CLI: run the server, manage the database, talk to the API.

Usage:
    coursebook serve --reload                    # Run the API with uvicorn
    coursebook init-db                           # Create tables (dev/SQLite)
    coursebook seed seed.json                    # Load users and courses
    coursebook register Jo Doe jo@example.com    # POST /users (prompts for password)
    coursebook me                                # GET /users as COURSEBOOK_EMAIL
    coursebook courses                           # List courses
    coursebook course 3                          # Show one course
    coursebook create-course "Intro" "Basics"    # POST /courses
    coursebook delete-course 3                   # DELETE /courses/3
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

from coursebook import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:5000/api"


def _api_url() -> str:
    return os.environ.get("COURSEBOOK_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(email: Optional[str] = None, password: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client, with Basic auth when credentials are given."""
    auth = httpx.BasicAuth(email, password) if email and password else None
    return httpx.AsyncClient(base_url=_api_url(), auth=auth, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous click handler.

    Offloads to a thread when an event loop is already running
    (e.g. CliRunner inside an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table. columns: (header, dict_key, width)."""
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _fail(response: httpx.Response) -> None:
    """Print an API error body and exit non-zero."""
    try:
        body = response.json()
    except ValueError:
        body = {"message": response.text}
    errors = body.get("errors") or [body.get("message") or body.get("error")]
    for err in errors:
        click.secho(f"Error ({response.status_code}): {err}", fg="red", err=True)
    sys.exit(1)


_email_option = click.option(
    "--email", envvar="COURSEBOOK_EMAIL", required=True,
    help="Account email (or set COURSEBOOK_EMAIL)",
)
_password_option = click.option(
    "--password", envvar="COURSEBOOK_PASSWORD", prompt=True, hide_input=True,
    help="Account password (or set COURSEBOOK_PASSWORD)",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="coursebook")
def main():
    """Coursebook: users, courses, and who owns what."""


# ---------------------------------------------------------------------------
# Server and database
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: COURSEBOOK_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: COURSEBOOK_PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from coursebook.config import settings

    uvicorn.run(
        "coursebook.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db():
    """Create any missing tables. Use Alembic for server databases."""
    from coursebook.db.engine import create_schema

    _run(create_schema())
    click.secho("Schema created", fg="green")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def seed(path: Path):
    """Load users and courses from a JSON file.

    The file holds {"users": [...], "courses": [...]} using the API's
    payload shapes; each course names its owner with "ownerEmail".
    """
    data = json.loads(path.read_text())
    users, courses = _run(_seed_impl(data))
    click.secho(f"Seeded {users} users and {courses} courses", fg="green")


async def _seed_impl(data: dict) -> tuple[int, int]:
    from coursebook.auth.dependencies import CurrentIdentity
    from coursebook.db.engine import async_session_factory
    from coursebook.errors import ValidationFailed
    from coursebook.services.course_service import CourseService
    from coursebook.services.user_service import UserService
    from coursebook.services.validation import check_course, check_user

    owners: dict[str, CurrentIdentity] = {}
    created_courses = 0
    async with async_session_factory() as db:
        try:
            for record in data.get("users", []):
                payload = await check_user(record, db)
                user = await UserService(db).register(payload)
                owners[user.email_address] = CurrentIdentity.from_user(user)

            for record in data.get("courses", []):
                owner = owners.get(record.get("ownerEmail", ""))
                if owner is None:
                    raise click.ClickException(
                        f"Course {record.get('title')!r}: unknown ownerEmail"
                    )
                await CourseService(db).create_course(owner, check_course(record))
                created_courses += 1
        except ValidationFailed as exc:
            raise click.ClickException("; ".join(exc.messages))
    return len(owners), created_courses


# ---------------------------------------------------------------------------
# API client commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("first_name")
@click.argument("last_name")
@click.argument("email")
@click.password_option()
def register(first_name: str, last_name: str, email: str, password: str):
    """Create an account."""
    _run(_register_impl(first_name, last_name, email, password))


async def _register_impl(first_name, last_name, email, password):
    async with _client() as c:
        r = await c.post("/users", json={
            "firstName": first_name,
            "lastName": last_name,
            "emailAddress": email,
            "password": password,
        })
    if r.status_code != 201:
        _fail(r)
    click.secho(f"Registered {email}", fg="green")


@main.command()
@_email_option
@_password_option
def me(email: str, password: str):
    """Show the account the credentials belong to."""
    _run(_me_impl(email, password))


async def _me_impl(email, password):
    async with _client(email, password) as c:
        r = await c.get("/users")
    if r.status_code != 200:
        _fail(r)
    user = r.json()
    click.echo(f"#{user['id']}  {user['name']} <{user['email']}>")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def courses(as_json: bool):
    """List all courses."""
    _run(_courses_impl(as_json))


async def _courses_impl(as_json: bool):
    async with _client() as c:
        r = await c.get("/courses")
    if r.status_code != 200:
        _fail(r)
    items = r.json()
    if as_json:
        click.echo(_pretty_json(items))
        return
    if not items:
        click.echo("No courses yet.")
        return
    rows = [
        {
            "id": item["id"],
            "title": item["title"],
            "estimatedTime": item.get("estimatedTime"),
            "owner": f"{item['User']['firstName']} {item['User']['lastName']}",
        }
        for item in items
    ]
    _print_table(rows, [
        ("ID", "id", 5), ("TITLE", "title", 40),
        ("TIME", "estimatedTime", 12), ("OWNER", "owner", 24),
    ])


@main.command()
@click.argument("course_id", type=int)
def course(course_id: int):
    """Show one course."""
    _run(_course_impl(course_id))


async def _course_impl(course_id: int):
    async with _client() as c:
        r = await c.get(f"/courses/{course_id}")
    if r.status_code != 200:
        _fail(r)
    click.echo(_pretty_json(r.json()))


@main.command("create-course")
@click.argument("title")
@click.argument("description")
@click.option("--estimated-time", help='e.g. "6 hours"')
@click.option("--materials", help="Materials needed")
@_email_option
@_password_option
def create_course(title, description, estimated_time, materials, email, password):
    """Create a course owned by the given account."""
    _run(_create_course_impl(
        title, description, estimated_time, materials, email, password
    ))


async def _create_course_impl(title, description, estimated_time, materials, email, password):
    body = {"title": title, "description": description}
    if estimated_time:
        body["estimatedTime"] = estimated_time
    if materials:
        body["materialsNeeded"] = materials
    async with _client(email, password) as c:
        r = await c.post("/courses", json=body)
    if r.status_code != 201:
        _fail(r)
    click.secho(f"Created {r.headers['Location']}", fg="green")


@main.command("delete-course")
@click.argument("course_id", type=int)
@_email_option
@_password_option
def delete_course(course_id: int, email: str, password: str):
    """Delete a course you own."""
    _run(_delete_course_impl(course_id, email, password))


async def _delete_course_impl(course_id, email, password):
    async with _client(email, password) as c:
        r = await c.delete(f"/courses/{course_id}")
    if r.status_code != 204:
        _fail(r)
    click.secho(f"Deleted course {course_id}", fg="green")


if __name__ == "__main__":
    main()
