import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.pool import StaticPool

from mobile_clinic.core.settings import Settings
from mobile_clinic.main import create_app
from mobile_clinic.models.location import Location

TEST_SECRET = "test-secret-key-with-at-least-32-characters"


@pytest.fixture
def test_settings():
    return Settings(
        app_env="test",
        secret_key=TEST_SECRET,
        auth_mode="permissive",
        seed_locations="Poipet,Mongkol Borey,Sisophon",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def app(test_settings, engine):
    return create_app(settings=test_settings, engine=engine)


@pytest.fixture
def api_client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db_session(app, api_client):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_headers(api_client):
    response = api_client.post("/auth/login", json={"username": "nurse_sophea"})
    assert response.status_code == 200, response.text
    token = response.json().get("token")
    assert token, "Missing token in login response"
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def location_id(db_session):
    location = db_session.scalar(select(Location).where(Location.name == "Poipet"))
    assert location is not None
    return location.id


@pytest.fixture
def register(api_client, auth_headers, location_id):
    def _register(name="Alice", queue_no="2a", visit_date="2026-03-01", patient_fields=None, **extra):
        body = {
            "patient": {"english_name": name, "location_id": location_id, **(patient_fields or {})},
            "visit": {"queue_no": queue_no, "visit_date": visit_date},
            **extra,
        }
        return api_client.post("/registration", json=body, headers=auth_headers)

    return _register
