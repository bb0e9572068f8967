import os
import json
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import select, func

# Keep the module-level app created on import away from real paths and databases.
_IMPORT_DIR = tempfile.mkdtemp(prefix="portal-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_IMPORT_DIR}/import.db")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_IMPORT_DIR, "uploads"))
os.environ.setdefault("LOG_DIR", os.path.join(_IMPORT_DIR, "logs"))
os.environ.setdefault("GCS_BUCKET_NAME", "")

from fastapi.testclient import TestClient

from main import create_app
from portal.core.config import Settings


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_DIR=str(tmp_path / "logs"),
        SECRET_KEY="test-secret",
        BCRYPT_ROUNDS=4,
        GCS_BUCKET_NAME="",
        ALLOW_AUTH_FALLBACK=False,
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    # Entering the client runs the lifespan, which opens the store and creates tables
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def upload_dir(settings) -> Path:
    return Path(settings.UPLOAD_DIR)


@pytest.fixture()
def auth_headers(client):
    response = client.post(
        "/api/signup",
        json={"email": "admin@portal.test", "password": "secret1", "role": "admin"},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture()
def db(client, app):
    """Run ``work(session)`` on the app's own event loop and return its result."""

    async def _with_session(work):
        async with app.state.store.session() as session:
            result = await work(session)
            await session.commit()
            return result

    def run(work):
        return client.portal.call(_with_session, work)

    return run


@pytest.fixture()
def count_rows(db):
    def count(model):
        async def work(session):
            return (await session.execute(select(func.count()).select_from(model))).scalar_one()
        return db(work)

    return count


def profile_form(email="jane@acme.test", projects=None, **overrides):
    if projects is None:
        projects = [{"name_project": "Website", "status": "in progress", "completion": 0.25}]
    form = {
        "name": "Jane Doe",
        "email": email,
        "phone": "555-0100",
        "location": "Berlin",
        "company": "Acme",
        "total_projects": "1",
        "total_spent": "1500.50",
        "join_date": "2024-01-15",
        "projects": projects if isinstance(projects, str) else json.dumps(projects),
    }
    form.update(overrides)
    return form


@pytest.fixture()
def create_profile(client, auth_headers):
    def create(**kwargs):
        files = kwargs.pop("files", None)
        response = client.post("/api/employees", data=profile_form(**kwargs), files=files, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return create
