"""
Authentication tests.

Verifies:
- Registration issues a token and rejects taken emails/usernames
- Login checks employees first, then customers
- Employee roles come from position title or username
"""

import jwt
import pytest

from storefront.services.auth_service import (
    hash_password,
    resolve_employee_role,
    verify_password,
)
from storefront.services import token_service
from storefront.services.token_service import TokenError

from conftest import PASSWORD, _create_user, auth_headers


class TestRegister:

    def test_register_returns_token_and_user(self, client):
        resp = client.post("/api/auth/register", json={
            "email": "carol@example.com",
            "username": "carol",
            "password": "secret1",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["token"]
        assert body["user"]["username"] == "carol"
        assert body["user"]["email"] == "carol@example.com"
        assert "password_hash" not in body["user"]

    def test_registered_user_can_login(self, client):
        client.post("/api/auth/register", json={
            "email": "carol@example.com", "username": "carol", "password": "secret1",
        })
        resp = client.post("/api/auth/login", json={"username": "carol", "password": "secret1"})
        assert resp.status_code == 200
        assert resp.get_json()["isEmployee"] is False

    def test_taken_email_rejected(self, client, customer_id):
        resp = client.post("/api/auth/register", json={
            "email": "alice@example.com", "username": "someone", "password": "secret1",
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Email is already in use"

    def test_taken_username_rejected(self, client, customer_id):
        resp = client.post("/api/auth/register", json={
            "email": "new@example.com", "username": "alice", "password": "secret1",
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Username is already taken"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "not-an-email", "username": "carol", "password": "secret1"},
            {"email": "carol@example.com", "username": "ca", "password": "secret1"},
            {"email": "carol@example.com", "username": "carol", "password": "123"},
            {"email": "carol@example.com", "username": "x" * 51, "password": "secret1"},
        ],
    )
    def test_invalid_payload_is_400_with_details(self, client, payload):
        resp = client.post("/api/auth/register", json=payload)
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"]
        assert body["details"]


class TestCheckUsername:

    def test_free_name_available(self, client):
        resp = client.get("/api/auth/check-username?username=freshname")
        assert resp.status_code == 200
        assert resp.get_json() == {"available": True}

    def test_taken_name_unavailable(self, client, customer_id):
        resp = client.get("/api/auth/check-username?username=alice")
        assert resp.get_json() == {"available": False}

    def test_short_name_never_available(self, client):
        resp = client.get("/api/auth/check-username?username=ab")
        assert resp.get_json() == {"available": False}


class TestLogin:

    def test_customer_login(self, client, customer_id):
        resp = client.post("/api/auth/login", json={"username": "alice", "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["token"]
        assert body["isEmployee"] is False
        assert body["user"]["id"] == customer_id
        assert body["user"]["role"] == "user"

    def test_employee_login_resolves_role(self, client, staff):
        resp = client.post("/api/auth/login", json={"username": "moder", "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["isEmployee"] is True
        assert body["user"]["role"] == "moderator"
        assert body["user"]["id"] == staff["moder"]

    def test_wrong_password_is_401(self, client, customer_id):
        resp = client.post("/api/auth/login", json={"username": "alice", "password": "wrong-pass"})
        assert resp.status_code == 401

    def test_wrong_employee_password_is_401(self, client, staff):
        resp = client.post("/api/auth/login", json={"username": "admin", "password": "wrong-pass"})
        assert resp.status_code == 401

    def test_unknown_user_is_401(self, client):
        resp = client.post("/api/auth/login", json={"username": "nobody", "password": PASSWORD})
        assert resp.status_code == 401

    def test_customer_without_password_is_401(self, client, db_session):
        _create_user(db_session, "legacy", "legacy@example.com", password=None)
        resp = client.post("/api/auth/login", json={"username": "legacy", "password": "anything"})
        assert resp.status_code == 401
        assert "not set" in resp.get_json()["error"]


class TestTokens:

    def test_customer_claims(self, app, customer_id):
        token = token_service.issue_customer_token(customer_id, "alice", "alice@example.com")
        principal = token_service.decode_token(token)
        assert principal.user_id == customer_id
        assert principal.role == "user"
        assert principal.is_customer
        assert not principal.is_employee

    def test_employee_claims(self, app):
        principal = token_service.decode_token(token_service.issue_employee_token(7, "mod", "moderator"))
        assert principal.employee_id == 7
        assert principal.role == "moderator"
        assert principal.is_employee
        assert not principal.is_customer

    def test_forged_token_rejected(self, app):
        forged = jwt.encode({"user_id": 1, "username": "x", "role": "admin"}, "other", algorithm="HS256")
        with pytest.raises(TokenError):
            token_service.decode_token(forged)

    def test_invalid_token_is_401(self, client):
        resp = client.get("/api/orders", headers=auth_headers("garbage"))
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid or expired token"


class TestEmployeeRoles:

    @pytest.mark.parametrize(
        "position,username,expected",
        [
            ("Administrator", "jane", "admin"),
            ("Sales Director", "jane", "admin"),
            ("Content Moderator", "jane", "moderator"),
            ("Support specialist", "jane", "support"),
            ("Data Analyst", "jane", "analyst"),
            (None, "support_bob", "support"),
            ("Intern", "jane", "user"),
        ],
    )
    def test_resolve_employee_role(self, position, username, expected):
        assert resolve_employee_role(position, username) == expected

    def test_admin_keyword_wins_over_later_keywords(self):
        assert resolve_employee_role("Support Director", "jane") == "admin"


class TestPasswords:

    def test_hash_roundtrip(self):
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert verify_password("secret1", hashed)
        assert not verify_password("secret2", hashed)

    @pytest.mark.parametrize("stored", [None, "", "   ", "not-a-bcrypt-hash"])
    def test_missing_or_malformed_hash_never_verifies(self, stored):
        assert not verify_password("anything", stored)
