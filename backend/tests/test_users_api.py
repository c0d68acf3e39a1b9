"""
HTTP tests for the user endpoints.
"""

from __future__ import annotations

import pytest

from app.api.deps import get_allocator, get_db
from app.core.constants import MAX_USER_ID
from app.core.errors import AllocationError
from app.db.session import build_engine, build_session_factory
from app.main import app


def _id_from(text: str) -> int:
    return int(text.rsplit(" ", 1)[-1])


class TestUserEndpoints:
    """create / get-by-email / update / delete over HTTP."""

    @pytest.mark.asyncio
    async def test_create_lookup_delete_scenario(self, client):
        response = await client.get("/create", params={"email": "a@x.com", "name": "A"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text.startswith("User successfully created with id = ")
        user_id = _id_from(response.text)

        response = await client.get("/get-by-email", params={"email": "a@x.com"})
        assert response.status_code == 200
        assert response.text == f"The user id is: {user_id}"

        response = await client.get("/delete", params={"id": user_id})
        assert response.status_code == 200
        assert response.text == "User successfully deleted!"

        response = await client.get("/get-by-email", params={"email": "a@x.com"})
        assert response.status_code == 404
        assert response.text == "User not found"

    @pytest.mark.asyncio
    async def test_created_ids_are_distinct(self, client):
        ids = []
        for n in range(5):
            response = await client.get("/create", params={"email": f"u{n}@x.com", "name": f"U{n}"})
            ids.append(_id_from(response.text))

        assert ids == [1000, 1001, 1002, 1003, 1004]

    @pytest.mark.asyncio
    async def test_create_with_empty_email_is_rejected(self, client):
        response = await client.get("/create", params={"email": "", "name": "A"})

        assert response.status_code == 400
        assert response.text == "User email must not be empty"

    @pytest.mark.asyncio
    async def test_create_without_params_is_unprocessable(self, client):
        response = await client.get("/create")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update(self, client):
        response = await client.get("/create", params={"email": "a@x.com", "name": "A"})
        user_id = _id_from(response.text)

        response = await client.get(
            "/update", params={"id": user_id, "email": "b@x.com", "name": "B"}
        )
        assert response.status_code == 200
        assert response.text == "User successfully updated!"

        response = await client.get("/get-by-email", params={"email": "b@x.com"})
        assert _id_from(response.text) == user_id

    @pytest.mark.asyncio
    async def test_update_missing_user(self, client):
        response = await client.get("/update", params={"id": 1, "email": "b@x.com", "name": "B"})

        assert response.status_code == 404
        assert response.text == "User 1 not found"

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, client):
        response = await client.get("/delete", params={"id": 123})

        assert response.status_code == 404
        assert response.text == "User 123 not found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", [-1, MAX_USER_ID + 1])
    async def test_out_of_range_id_is_unprocessable(self, client, bad_id):
        response = await client.get("/delete", params={"id": bad_id})
        assert response.status_code == 422

        response = await client.get(
            "/update", params={"id": bad_id, "email": "b@x.com", "name": "B"}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_largest_id_is_accepted(self, client):
        response = await client.get("/delete", params={"id": MAX_USER_ID})

        assert response.status_code == 404
        assert response.text == f"User {MAX_USER_ID} not found"

    @pytest.mark.asyncio
    async def test_allocation_failure_is_reported(self, client):
        class FailingAllocator:
            async def next_id(self, block_name):
                raise AllocationError("Could not claim a high value", block_name=block_name, attempts=5)

        app.dependency_overrides[get_allocator] = lambda: FailingAllocator()

        response = await client.get("/create", params={"email": "a@x.com", "name": "A"})

        assert response.status_code == 503
        assert response.text == "Could not claim a high value"

        response = await client.get("/get-by-email", params={"email": "a@x.com"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.asyncio
    async def test_unreachable_database_is_reported(self, client, tmp_path):
        missing = tmp_path / "no-such-dir" / "db.sqlite"
        engine = build_engine(f"sqlite+aiosqlite:///{missing}")
        unreachable = build_session_factory(engine)

        async def override_get_db():
            async with unreachable() as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        try:
            response = await client.get("/get-by-email", params={"email": "a@x.com"})
            assert response.status_code == 503
            assert response.text == "Database unavailable"

            response = await client.get("/delete", params={"id": 1000})
            assert response.status_code == 503
        finally:
            await engine.dispose()
