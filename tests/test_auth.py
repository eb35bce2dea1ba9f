"""
Auth Tests — password hashing, login, actor header and role probes.

Tests cover:
  - Password hashing (bcrypt)
  - Login by email or employee id, failure codes, last_login_at stamp
  - /me with and without the user-id header
  - Role probes: admin passes every check, others only their own
"""

import pytest

from issue_tracker.models import db
from issue_tracker.utils.crypto import hash_password, verify_password

DEFAULT_PASSWORD = "Secret123!"  # matches the make_user fixture


# ═══════════════════════════════════════════════════════════════
# BLOCK 1: Crypto (bcrypt)
# ═══════════════════════════════════════════════════════════════

class TestCrypto:
    def test_hash_and_verify(self):
        pw = "MySecretPassword123!"
        hashed = hash_password(pw)
        assert hashed != pw
        assert verify_password(pw, hashed) is True

    def test_wrong_password(self):
        hashed = hash_password("correct")
        assert verify_password("wrong", hashed) is False

    def test_empty_hash(self):
        assert verify_password("anything", "") is False
        assert verify_password("anything", None) is False

    def test_non_bcrypt_hash_never_verifies(self):
        assert verify_password("pw", "pbkdf2:sha256:600000$salt$deadbeef") is False
        assert verify_password("pw", "pw") is False

    def test_malformed_bcrypt_hash(self):
        assert verify_password("pw", "$2b$12$tooshort") is False


# ═══════════════════════════════════════════════════════════════
# BLOCK 2: Login
# ═══════════════════════════════════════════════════════════════

class TestLoginAPI:
    def test_login_by_email(self, client, make_user):
        user = make_user(email="warsame@opsdesk.so")
        res = client.post("/api/v1/auth/login", json={
            "email": "warsame@opsdesk.so",
            "password": DEFAULT_PASSWORD,
        })
        assert res.status_code == 200
        data = res.get_json()
        assert data["message"] == "Login successful"
        assert data["user"]["id"] == user.id
        assert "password_hash" not in data["user"]

    def test_login_email_case_insensitive(self, client, make_user):
        make_user(email="warsame@opsdesk.so")
        res = client.post("/api/v1/auth/login", json={
            "email": "Warsame@OpsDesk.so",
            "password": DEFAULT_PASSWORD,
        })
        assert res.status_code == 200

    def test_login_by_employee_id(self, client, make_user):
        user = make_user(employee_id="EMP7788")
        res = client.post("/api/v1/auth/login", json={
            "employee_id": "EMP7788",
            "password": DEFAULT_PASSWORD,
        })
        assert res.status_code == 200
        assert res.get_json()["user"]["employee_id"] == user.employee_id

    def test_login_stamps_last_login(self, client, make_user):
        user = make_user()
        assert user.last_login_at is None
        client.post("/api/v1/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
        db.session.refresh(user)
        assert user.last_login_at is not None

    def test_login_wrong_password(self, client, make_user):
        user = make_user()
        res = client.post("/api/v1/auth/login", json={"email": user.email, "password": "WrongPass"})
        assert res.status_code == 401

    def test_login_unknown_user(self, client):
        res = client.post("/api/v1/auth/login", json={
            "email": "nobody@opsdesk.so", "password": DEFAULT_PASSWORD,
        })
        assert res.status_code == 401

    def test_login_inactive_user(self, client, make_user):
        user = make_user(active=False)
        res = client.post("/api/v1/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
        assert res.status_code == 403

    @pytest.mark.parametrize("payload", [
        {},
        {"password": DEFAULT_PASSWORD},
        {"email": "someone@opsdesk.so"},
    ])
    def test_login_missing_fields(self, client, payload):
        res = client.post("/api/v1/auth/login", json=payload)
        assert res.status_code == 400


# ═══════════════════════════════════════════════════════════════
# BLOCK 3: Actor header + role probes
# ═══════════════════════════════════════════════════════════════

class TestActorAndRoles:
    def test_me_without_auth(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401

    def test_me_with_unknown_user(self, client):
        res = client.get("/api/v1/auth/me", headers={"X-User-ID": "4242"})
        assert res.status_code == 401

    def test_me_endpoint(self, client, make_user, auth_headers):
        user = make_user(first_name="Muna", last_name="Abdi")
        res = client.get("/api/v1/auth/me", headers=auth_headers(user))
        assert res.status_code == 200
        assert res.get_json()["full_name"] == "Muna Abdi"

    def test_fallback_header(self, client, make_user):
        user = make_user()
        res = client.get("/api/v1/auth/me", headers={"user-id": str(user.id)})
        assert res.status_code == 200

    def test_admin_passes_every_probe(self, client, make_user, auth_headers):
        admin = make_user(role="admin")
        for probe in ("admin", "technical", "support"):
            assert client.get(f"/api/v1/auth/{probe}", headers=auth_headers(admin)).status_code == 200

    def test_technical_only_own_probe(self, client, make_user, auth_headers):
        tech = make_user(role="technical")
        headers = auth_headers(tech)
        assert client.get("/api/v1/auth/technical", headers=headers).status_code == 200
        res = client.get("/api/v1/auth/support", headers=headers)
        assert res.status_code == 403
        assert res.get_json()["required_role"] == ["customer_support"]
        assert client.get("/api/v1/auth/admin", headers=headers).status_code == 403

    def test_support_probe(self, client, make_user, auth_headers):
        agent = make_user(role="customer_support")
        assert client.get("/api/v1/auth/support", headers=auth_headers(agent)).status_code == 200
