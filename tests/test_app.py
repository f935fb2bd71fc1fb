"""
Application level behaviour: error envelope, health check, admin and audit routes.
"""
from conftest import ADMIN_EMAIL


class TestEnvelope:
    def test_unknown_route(self, client):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Route not found", "code": "NotFound"}

    def test_health(self, client):
        assert client.get("/api/health").json() == {"success": True, "status": "healthy"}

    def test_root(self, client):
        assert client.get("/").json()["success"] is True

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/login", json={})
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["code"] == "MissingRequiredField"
        assert {e["field"] for e in body["errors"]} == {"email", "password"}

    def test_invalid_field(self, client):
        resp = client.post("/api/auth/login", json={"email": "not-an-email", "password": "x"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "ValidationError"
        assert body["errors"][0]["field"] == "email"


class TestAdminUsers:
    def test_list_users(self, client, api, admin_token):
        api.create_patient(admin_token, name="Pam")
        api.create_doctor(admin_token, name="Dan")
        headers = api.headers(admin_token)

        body = client.get("/api/admin/users", headers=headers).json()
        assert body["pagination"]["total"] == 3

        body = client.get("/api/admin/users", params={"role": "doctor"}, headers=headers).json()
        assert [u["name"] for u in body["data"]] == ["Dan"]

        body = client.get("/api/admin/users", params={"search": "pam"}, headers=headers).json()
        assert [u["role"] for u in body["data"]] == ["patient"]

        assert client.get("/api/admin/users", params={"role": "nurse"}, headers=headers).status_code == 400

    def test_cannot_delete_self(self, client, api, admin_token):
        me = client.get("/api/auth/me", headers=api.headers(admin_token)).json()["user"]
        resp = client.delete(f"/api/admin/users/{me['id']}", headers=api.headers(admin_token))
        assert resp.status_code == 400
        assert resp.json()["message"] == "You cannot delete your own account"

    def test_delete_user(self, client, api, admin_token):
        patient = api.create_patient(admin_token)
        headers = api.headers(admin_token)
        resp = client.delete(f"/api/admin/users/{patient['userId']}", headers=headers)
        assert resp.status_code == 200
        assert client.get(f"/api/patients/{patient['id']}", headers=headers).status_code == 404
        assert client.delete(f"/api/admin/users/{patient['userId']}", headers=headers).status_code == 404

    def test_patient_is_forbidden(self, client, api, admin_token):
        patient = api.create_patient(admin_token)
        assert client.get("/api/admin/users", headers=api.headers_for(patient)).status_code == 403


class TestAuditLog:
    def test_login_is_recorded(self, client, api, admin_token):
        api.login(ADMIN_EMAIL, "secret1")
        client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "bad-password"})
        headers = api.headers(admin_token)

        body = client.get("/api/logs", params={"action": "login"}, headers=headers).json()
        assert body["pagination"]["total"] == 2
        assert {item["status"] for item in body["data"]} == {"SUCCESS", "FAIL"}
        assert body["data"][0]["actorEmail"] == ADMIN_EMAIL

        body = client.get("/api/logs", params={"status": "FAIL"}, headers=headers).json()
        assert body["count"] == 1
        assert body["data"][0]["meta"]["email"] == ADMIN_EMAIL

    def test_resource_changes_are_recorded(self, client, api, admin_token):
        patient = api.create_patient(admin_token)
        client.delete(f"/api/patients/{patient['id']}", headers=api.headers(admin_token))

        body = client.get("/api/logs", params={"resource": "patients"}, headers=api.headers(admin_token)).json()
        assert [item["action"] for item in body["data"]] == ["PATIENT_DELETE", "PATIENT_CREATE"]

    def test_logs_are_admin_only(self, client, api, admin_token):
        doctor = api.create_doctor(admin_token)
        assert client.get("/api/logs", headers=api.headers_for(doctor)).status_code == 403
        assert client.get("/api/logs").status_code == 401

    def test_bad_date_filter(self, client, api, admin_token):
        resp = client.get("/api/logs", params={"from": "yesterday"}, headers=api.headers(admin_token))
        assert resp.status_code == 400
        assert resp.json()["code"] == "ValidationError"

    def test_failed_creates_are_recorded(self, client, api, admin_token):
        patient = api.create_patient(admin_token)
        doctor = api.create_doctor(admin_token)
        headers = api.headers(admin_token)

        resp = client.post("/api/patients", headers=headers, json={
            "name": "Copy", "email": patient["email"], "password": "secret1", "dateOfBirth": "1990-01-01", "phone": "1",
        })
        assert resp.status_code == 400
        resp = client.post("/api/doctors", headers=headers, json={
            "name": "Copy", "email": "copy@clinic.org", "password": "secret1",
            "specialization": "ENT", "licenseNumber": doctor["licenseNumber"], "phone": "1",
        })
        assert resp.status_code == 400

        body = client.get("/api/logs", params={"status": "FAIL"}, headers=headers).json()
        failures = {item["action"]: item["meta"]["reason"] for item in body["data"]}
        assert failures == {"PATIENT_CREATE": "DuplicateEmail", "DOCTOR_CREATE": "DuplicateLicense"}

        body = client.get("/api/logs", params={"action": "PATIENT_CREATE", "status": "SUCCESS"}, headers=headers).json()
        assert body["data"][0]["meta"]["email"] == patient["email"]
