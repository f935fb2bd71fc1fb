"""
Shared pytest fixtures. Every test runs against a fresh in-memory SQLite
database through the real FastAPI application.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401
from database import Base, SessionLocal, engine
from main import app

ADMIN_EMAIL = "admin@x.com"
ADMIN_PASSWORD = "secret1"


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


class Api:
    """Small helper around the HTTP API used by the endpoint tests."""

    def __init__(self, client: TestClient):
        self.client = client
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    @staticmethod
    def headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    def register_admin(self, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, name="Admin"):
        resp = self.client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        return resp.json()["token"]

    def login(self, email, password):
        resp = self.client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json()["token"]

    def headers_for(self, account):
        """Log in as a patient or doctor returned by create_patient/create_doctor."""
        return self.headers(self.login(account["email"], account["password"]))

    def create_patient(self, admin_token, **overrides):
        n = self._next()
        payload = {
            "name": f"Patient {n}",
            "email": f"patient{n}@clinic.org",
            "password": "patient123",
            "dateOfBirth": "1990-05-01",
            "phone": f"555-01{n:02d}",
        }
        payload.update(overrides)
        resp = self.client.post("/api/patients", json=payload, headers=self.headers(admin_token))
        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        data["password"] = payload["password"]
        return data

    def create_doctor(self, admin_token, **overrides):
        n = self._next()
        payload = {
            "name": f"Doctor {n}",
            "email": f"doctor{n}@clinic.org",
            "password": "doctor123",
            "specialization": "Cardiology",
            "licenseNumber": f"LIC-{n:04d}",
            "phone": f"555-02{n:02d}",
        }
        payload.update(overrides)
        resp = self.client.post("/api/doctors", json=payload, headers=self.headers(admin_token))
        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        data["password"] = payload["password"]
        return data

    def assign(self, admin_token, patient_id, doctor_id, notes=None):
        return self.client.post(
            "/api/mappings",
            json={"patientId": patient_id, "doctorId": doctor_id, "notes": notes},
            headers=self.headers(admin_token),
        )


@pytest.fixture
def api(client):
    return Api(client)


@pytest.fixture
def admin_token(api):
    return api.register_admin()
