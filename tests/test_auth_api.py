"""
Tests for /api/auth: registration, login and the authenticated account routes.
"""
from datetime import timedelta

import pytest

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD
from utils.tokenJWT import create_access_token, verify_access_token


class TestRegister:
    def test_register_admin_then_login(self, client, api):
        resp = client.post("/api/auth/register", json={"name": "Root", "email": "root@x.com", "password": "secret1"})
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["user"]["role"] == "admin"
        assert "passwordHash" not in body["user"]
        assert verify_access_token(body["token"]).role == "admin"

        resp = client.post("/api/auth/login", json={"email": "root@x.com", "password": "secret1"})
        assert resp.status_code == 200
        assert resp.json()["user"]["role"] == "admin"

    @pytest.mark.parametrize("role", ["patient", "doctor", "superuser"])
    def test_public_register_only_accepts_admin(self, client, role):
        resp = client.post("/api/auth/register",
                           json={"name": "X", "email": "x@x.com", "password": "secret1", "role": role})
        assert resp.status_code == 400
        assert resp.json()["code"] == "InvalidRequest"

    def test_duplicate_email(self, client, admin_token):
        resp = client.post("/api/auth/register",
                           json={"name": "Again", "email": ADMIN_EMAIL, "password": "secret1"})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Email already in use", "code": "DuplicateEmail"}

    def test_short_password_rejected(self, client):
        resp = client.post("/api/auth/register", json={"name": "X", "email": "x@x.com", "password": "123"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "ValidationError"
        assert body["errors"][0]["field"] == "password"

    def test_register_patient_requires_admin(self, client, api, admin_token):
        payload = {"name": "P", "email": "p@x.com", "password": "secret1", "dateOfBirth": "1990-01-01", "phone": "1"}
        assert client.post("/api/auth/register/patient", json=payload).status_code == 401

        resp = client.post("/api/auth/register/patient", json=payload, headers=api.headers(admin_token))
        assert resp.status_code == 201
        assert resp.json()["user"]["role"] == "patient"

        patient_token = api.login("p@x.com", "secret1")
        resp = client.post("/api/auth/register/patient", json={**payload, "email": "q@x.com"},
                           headers=api.headers(patient_token))
        assert resp.status_code == 403
        assert resp.json()["code"] == "Forbidden"

    def test_register_patient_without_phone(self, client, api, admin_token):
        payload = {"name": "P", "email": "p@x.com", "password": "secret1", "dateOfBirth": "1990-01-01"}
        resp = client.post("/api/auth/register/patient", json=payload, headers=api.headers(admin_token))
        assert resp.status_code == 400
        assert resp.json()["code"] == "MissingRequiredField"
        # Nothing was written
        assert client.post("/api/auth/login", json={"email": "p@x.com", "password": "secret1"}).status_code == 401

    def test_register_doctor(self, client, api, admin_token):
        payload = {"name": "D", "email": "d@x.com", "password": "secret1",
                   "specialization": "Oncology", "licenseNumber": "ONC-1", "phone": "1"}
        resp = client.post("/api/auth/register/doctor", json=payload, headers=api.headers(admin_token))
        assert resp.status_code == 201

        resp = client.post("/api/auth/register/doctor", json={**payload, "email": "e@x.com"},
                           headers=api.headers(admin_token))
        assert resp.status_code == 400
        assert resp.json()["code"] == "DuplicateLicense"


class TestLogin:
    @pytest.mark.parametrize("email,password", [(ADMIN_EMAIL, "wrong-password"), ("ghost@x.com", ADMIN_PASSWORD)])
    def test_bad_credentials_look_the_same(self, client, admin_token, email, password):
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 401
        assert resp.json()["code"] == "InvalidCredentials"
        assert resp.json()["message"] == "Invalid credentials"

    def test_login_as_patient(self, api, admin_token):
        patient = api.create_patient(admin_token)
        token = api.login(patient["email"], patient["password"])
        claims = verify_access_token(token)
        assert claims.user_id == patient["userId"]
        assert claims.role == "patient"


class TestAuthenticatedRoutes:
    def test_missing_token(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json()["code"] == "AuthenticationRequired"

    def test_garbage_token(self, client, api):
        resp = client.get("/api/auth/me", headers=api.headers("not.a.token"))
        assert resp.status_code == 401
        assert resp.json()["code"] == "InvalidToken"

    def test_expired_token(self, client, api, admin_token):
        user_id = verify_access_token(admin_token).user_id
        expired = create_access_token(user_id, "admin", expires_delta=timedelta(seconds=-5))
        resp = client.get("/api/auth/me", headers=api.headers(expired))
        assert resp.status_code == 401
        assert resp.json()["code"] == "ExpiredToken"

    def test_token_for_deleted_user(self, client, api, admin_token):
        patient = api.create_patient(admin_token)
        token = api.login(patient["email"], patient["password"])
        resp = client.delete(f"/api/patients/{patient['id']}", headers=api.headers(admin_token))
        assert resp.status_code == 200

        resp = client.get("/api/auth/me", headers=api.headers(token))
        assert resp.status_code == 401
        assert resp.json()["code"] == "InvalidToken"

    def test_me_includes_profile(self, client, api, admin_token):
        patient = api.create_patient(admin_token, bloodType="AB-")
        token = api.login(patient["email"], patient["password"])

        user = client.get("/api/auth/me", headers=api.headers(token)).json()["user"]
        assert user["role"] == "patient"
        assert user["patientProfile"]["bloodType"] == "AB-"
        assert user["patientProfile"]["dateOfBirth"] == "1990-05-01"
        assert user["doctorProfile"] is None

    def test_update_me(self, client, api, admin_token):
        resp = client.put("/api/auth/me", json={"name": "Chief"}, headers=api.headers(admin_token))
        assert resp.status_code == 200
        assert resp.json()["user"]["name"] == "Chief"
        assert resp.json()["user"]["email"] == ADMIN_EMAIL

        resp = client.put("/api/auth/me", json={}, headers=api.headers(admin_token))
        assert resp.status_code == 400
        assert resp.json()["code"] == "ValidationError"

    def test_change_password(self, client, api, admin_token):
        headers = api.headers(admin_token)
        resp = client.put("/api/auth/password", json={"currentPassword": "nope", "newPassword": "another1"},
                          headers=headers)
        assert resp.status_code == 401

        resp = client.put("/api/auth/password", json={"currentPassword": ADMIN_PASSWORD, "newPassword": "another1"},
                          headers=headers)
        assert resp.status_code == 200
        api.login(ADMIN_EMAIL, "another1")
        assert client.post("/api/auth/login",
                           json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}).status_code == 401
