#!/usr/bin/env python3
"""
Coursebook Quickstart: the whole ownership story in one script.

Registers two users, creates a course as the first, shows that the second
can read it but can't change or delete it, then deletes it as the owner.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: coursebook serve
"""

import sys
import uuid

import httpx

BASE = "http://localhost:5000/api"


def register(client: httpx.Client, first: str, last: str, email: str, password: str):
    resp = client.post("/users", json={
        "firstName": first,
        "lastName": last,
        "emailAddress": email,
        "password": password,
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    return httpx.BasicAuth(email, password)


def main():
    run_id = uuid.uuid4().hex[:6]
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        sys.exit(1)
    print(f"  Database: {'✓' if resp.json()['database'] == 'ok' else '✗'}")

    # ── Users ─────────────────────────────────────────────────────
    print("\n1. Registering two users...")
    jo = register(client, "Jo", "Doe", f"jo-{run_id}@example.com", "secretpw")
    sam = register(client, "Sam", "Roe", f"sam-{run_id}@example.com", "anotherpw")
    me = client.get("/users", auth=jo).json()
    print(f"   Jo is user #{me['id']} ({me['name']})")

    # ── Create a course as Jo ─────────────────────────────────────
    print("\n2. Creating a course as Jo...")
    resp = client.post(
        "/courses",
        json={"title": "Intro", "description": "Basics", "estimatedTime": "2 hours"},
        auth=jo,
    )
    assert resp.status_code == 201, f"Failed: {resp.text}"
    course_path = resp.headers["Location"]
    print(f"   Location: {course_path}")

    course = client.get(course_path).json()
    print(f"   Owner: {course['User']['firstName']} {course['User']['lastName']}")

    # ── Sam can't touch it ────────────────────────────────────────
    print("\n3. Sam tries to edit and delete Jo's course...")
    resp = client.put(course_path, json={"title": "Mine now", "description": "x"}, auth=sam)
    print(f"   PUT    → {resp.status_code} {resp.json()}")
    resp = client.delete(course_path, auth=sam)
    print(f"   DELETE → {resp.status_code} {resp.json()}")

    # ── Jo updates and deletes ────────────────────────────────────
    print("\n4. Jo updates, then deletes the course...")
    resp = client.put(course_path, json={"title": "Intro II", "description": "More"}, auth=jo)
    print(f"   PUT    → {resp.status_code}")
    resp = client.delete(course_path, auth=jo)
    print(f"   DELETE → {resp.status_code}")
    print(f"   GET    → {client.get(course_path).status_code}")

    print("\nDone.")


if __name__ == "__main__":
    main()
