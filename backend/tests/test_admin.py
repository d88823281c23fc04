"""
Admin tests: staff accounts, providers, categories and catalog entries.
"""

import pytest

from conftest import PASSWORD, auth_headers, get_auth_token


NEW_PROVIDER = {
    "provider_name": "Bluepeak Publishing",
    "provider_type": "Publisher",
    "country": "Germany",
    "founded_date": "2004-09-14",
    "web": "https://bluepeak.example",
}


class TestEmployees:

    def test_list_employees_with_roles(self, client, admin_headers):
        employees = client.get("/api/admin/employees", headers=admin_headers).get_json()
        roles = {e["username"]: e["role"] for e in employees}
        assert roles == {
            "admin": "admin",
            "moder": "moderator",
            "helper": "support",
            "numbers": "analyst",
            "intern": "user",
        }

    def test_create_employee_who_can_login(self, client, admin_headers):
        resp = client.post("/api/admin/employees", headers=admin_headers, json={
            "username": "newmod", "password": "secret1", "position": "Moderator",
        })
        assert resp.status_code == 201
        assert resp.get_json()["role"] == "moderator"

        token = get_auth_token(client, "newmod", "secret1")
        assert token
        resp = client.get("/api/moderation/reviews", headers=auth_headers(token))
        assert resp.status_code == 200

    def test_create_employee_reuses_position(self, client, admin_headers):
        client.post("/api/admin/employees", headers=admin_headers, json={
            "username": "second_analyst", "password": "secret1", "position": "Analyst",
        })
        employees = client.get("/api/admin/employees", headers=admin_headers).get_json()
        analysts = [e for e in employees if e["position"] == "Analyst"]
        assert len(analysts) == 2

    def test_username_taken_by_customer_is_400(self, client, admin_headers, customer_id):
        resp = client.post("/api/admin/employees", headers=admin_headers, json={
            "username": "alice", "password": "secret1", "position": "Moderator",
        })
        assert resp.status_code == 400

    def test_set_employee_password(self, client, admin_headers, staff):
        resp = client.patch(
            f"/api/admin/employees/{staff['helper']}/password",
            headers=admin_headers,
            json={"password": "brand-new"},
        )
        assert resp.status_code == 200
        assert get_auth_token(client, "helper", PASSWORD) is None
        assert get_auth_token(client, "helper", "brand-new")

    def test_set_password_for_missing_employee_is_404(self, client, admin_headers):
        resp = client.patch("/api/admin/employees/999999/password", headers=admin_headers, json={"password": "secret1"})
        assert resp.status_code == 404


class TestCatalogAdmin:

    def test_create_provider(self, client, admin_headers):
        resp = client.post("/api/admin/providers", headers=admin_headers, json=NEW_PROVIDER)
        assert resp.status_code == 201
        provider = resp.get_json()
        assert provider["name"] == "Bluepeak Publishing"
        assert provider["type"] == "Publisher"

        providers = client.get("/api/admin/providers", headers=admin_headers).get_json()
        assert [p["name"] for p in providers] == ["Bluepeak Publishing"]

    def test_provider_type_is_validated(self, client, admin_headers):
        resp = client.post("/api/admin/providers", headers=admin_headers, json=dict(NEW_PROVIDER, provider_type="Studio"))
        assert resp.status_code == 400

    def test_categories(self, client, catalog, admin_headers):
        categories = client.get("/api/admin/categories", headers=admin_headers).get_json()
        assert [c["title"] for c in categories] == ["Games", "Utilities"]

    def test_create_app_appears_in_catalog(self, client, catalog, admin_headers):
        resp = client.post("/api/admin/apps", headers=admin_headers, json={
            "provider_id": catalog["provider_id"],
            "category_id": catalog["tools_id"],
            "title": "Backup Buddy",
            "description": "Scheduled backups",
            "cost_price": "1.50",
            "price": "3.99",
            "release_date": "2025-01-15",
        })
        assert resp.status_code == 201
        app_id = resp.get_json()["id"]

        app = client.get(f"/api/apps/{app_id}").get_json()
        assert app["title"] == "Backup Buddy"
        assert app["price"] == 3.99
        assert app["category"]["title"] == "Utilities"

    @pytest.mark.parametrize("field", ["provider_id", "category_id"])
    def test_create_app_with_missing_reference_is_404(self, client, catalog, admin_headers, field):
        payload = {
            "provider_id": catalog["provider_id"],
            "category_id": catalog["tools_id"],
            "title": "Ghost",
            "description": "Points nowhere",
            "cost_price": 1,
            "price": 2,
            "release_date": "2025-01-15",
        }
        payload[field] = 999999
        resp = client.post("/api/admin/apps", headers=admin_headers, json=payload)
        assert resp.status_code == 404

    def test_negative_price_is_400(self, client, catalog, admin_headers):
        resp = client.post("/api/admin/apps", headers=admin_headers, json={
            "provider_id": catalog["provider_id"],
            "category_id": catalog["tools_id"],
            "title": "Bad",
            "description": "Negative",
            "cost_price": 1,
            "price": -2,
            "release_date": "2025-01-15",
        })
        assert resp.status_code == 400
