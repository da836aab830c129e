import pytest
from fastapi.testclient import TestClient
import mongomock

from healthconnect.main import app
from healthconnect.db import MongoStore
from healthconnect.db_init import ensure_indexes


@pytest.fixture(autouse=True)
def store():
    # in-memory mongo for every test
    s = MongoStore(client=mongomock.MongoClient(), db_name="test_db").open()
    ensure_indexes(s)
    app.state.store = s
    yield s
    app.state.store = None
    s.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user and return (body, headers)."""
    def _register(role="patient", email=None, **extra):
        payload = {
            "name": extra.pop("name", "Test " + role.title()),
            "email": email or f"{role}@example.com",
            "phone": "555-0100",
            "password": "secret123",
            "role": role,
        }
        if role == "provider":
            payload.update({"specialization": "Cardiology", "hospital": "City Hospital", "licenseNumber": "LIC-1"})
        payload.update(extra)
        res = client.post("/auth/register", json=payload)
        assert res.status_code == 201, res.text
        body = res.json()
        return body, {"Authorization": f"Bearer {body['token']}"}
    return _register


@pytest.fixture
def patient(register):
    return register("patient", "pat@example.com", name="Priya Patient")


@pytest.fixture
def doctor(register):
    return register("provider", "doc@example.com", name="Dr. Dev")
