import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from educrm.database import get_db
from educrm.main import app


def _assert_request_id(r) -> dict:
    payload = r.json()
    assert "request_id" in payload
    assert payload["request_id"], payload
    assert r.headers.get("x-request-id") == payload["request_id"]
    return payload


def test_error_responses_include_request_id_in_body_and_header():
    client = TestClient(app)

    r = client.get("/this-route-does-not-exist")
    assert r.status_code == 404
    _assert_request_id(r)


def test_caller_request_id_is_reused(client, seeded):
    r = client.get(f"/api/v1/applications/{uuid.uuid4()}", headers={"X-Request-ID": "abc-123"})
    assert r.status_code == 404

    payload = _assert_request_id(r)
    assert payload["request_id"] == "abc-123"
    assert payload["detail"] == "Application not found"


def test_validation_error_names_the_field(client, seeded):
    r = client.post("/api/v1/applications", json={"student_id": "", "program_name": "MBA"})
    assert r.status_code == 422

    payload = _assert_request_id(r)
    assert payload["field"] == "student_id"
    assert payload["detail"] == "student_id is required"


@pytest.fixture()
def broken_client(tmp_path):
    # A database without the schema: every query fails at the storage layer.
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}", poolclass=NullPool)
    session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    async def _get_broken_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = _get_broken_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


def test_storage_failure_is_503(broken_client):
    r = broken_client.get("/api/v1/applications")
    assert r.status_code == 503

    payload = _assert_request_id(r)
    assert payload["detail"] == "fetch_applications failed"
