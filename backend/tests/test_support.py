"""
Support request and chat tests.

    CREATED --take--> PROCESSING --close (admin)--> COMPLETED
"""

import pytest

from storefront.models.sales import ORDER_COMPLETED
from storefront.models.support import REQUEST_COMPLETED, REQUEST_CREATED, REQUEST_PROCESSING


@pytest.fixture
def order_id(catalog, customer_id, make_order):
    return make_order(customer_id, catalog["star_drift_id"], status=ORDER_COMPLETED)


@pytest.fixture
def request_id(client, customer_headers, order_id):
    resp = client.post("/api/support", headers=customer_headers, json={
        "subject": "Download broken",
        "message": "The download link returns an error page",
        "priority": "high",
        "orderId": order_id,
    })
    assert resp.status_code == 201
    return resp.get_json()["request"]["id"]


class TestCustomerSide:

    def test_create_request_starts_chat(self, client, customer_headers, request_id):
        requests = client.get("/api/support", headers=customer_headers).get_json()
        assert len(requests) == 1
        assert requests[0]["status"] == REQUEST_CREATED
        assert requests[0]["priority"] == "high"

        chat = client.get(f"/api/support/{request_id}/messages", headers=customer_headers).get_json()
        assert len(chat) == 1
        assert chat[0]["message"] == "The download link returns an error page"
        assert chat[0]["senderType"] == "user"
        assert chat[0]["senderUsername"] == "alice"

    def test_create_response_shape(self, client, customer_headers, order_id):
        resp = client.post("/api/support", headers=customer_headers, json={
            "subject": "Refund please", "message": "I bought this by mistake", "orderId": order_id,
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "Support request created"
        assert set(body["request"]) == {"id", "status", "createdAt"}
        assert body["request"]["status"] == REQUEST_CREATED
        assert body["request"]["createdAt"].endswith("Z")

    def test_priority_defaults_to_normal(self, client, customer_headers, order_id):
        resp = client.post("/api/support", headers=customer_headers, json={
            "subject": "Question", "message": "How do I reinstall?", "orderId": order_id,
        })
        assert resp.status_code == 201
        requests = client.get("/api/support", headers=customer_headers).get_json()
        assert requests[0]["priority"] == "normal"

    def test_foreign_order_is_403(self, client, catalog, other_customer_id, customer_headers, make_order):
        foreign = make_order(other_customer_id, catalog["moon_miner_id"])
        resp = client.post("/api/support", headers=customer_headers, json={
            "subject": "Not mine", "message": "Trying someone else's order", "orderId": foreign,
        })
        assert resp.status_code == 403

    @pytest.mark.parametrize(
        "payload",
        [
            {"subject": "Hey", "message": "Long enough message here"},
            {"subject": "Valid subject", "message": "short"},
            {"subject": "Valid subject", "message": "Long enough message here", "priority": "urgent"},
        ],
    )
    def test_invalid_request_is_400(self, client, customer_headers, order_id, payload):
        payload = dict(payload, orderId=order_id)
        assert client.post("/api/support", headers=customer_headers, json=payload).status_code == 400

    def test_cannot_read_other_customers_chat(self, client, request_id, other_customer_headers):
        resp = client.get(f"/api/support/{request_id}/messages", headers=other_customer_headers)
        assert resp.status_code == 403

    def test_post_message(self, client, customer_headers, request_id):
        resp = client.post(
            f"/api/support/{request_id}/messages", headers=customer_headers, json={"message": "Any news?"}
        )
        assert resp.status_code == 201
        chat = client.get(f"/api/support/{request_id}/messages", headers=customer_headers).get_json()
        assert [m["message"] for m in chat][-1] == "Any news?"

    def test_employee_replies_show_generic_name(self, client, customer_headers, support_headers, request_id):
        client.patch(f"/api/employee-support/requests/{request_id}/take", headers=support_headers)
        client.post(
            f"/api/employee-support/requests/{request_id}/messages",
            headers=support_headers,
            json={"message": "Looking into it"},
        )

        chat = client.get(f"/api/support/{request_id}/messages", headers=customer_headers).get_json()
        assert chat[-1]["senderType"] == "employee"
        assert chat[-1]["senderUsername"] == "Support agent"

    def test_cannot_post_to_completed_request(self, client, customer_headers, admin_headers, request_id):
        client.patch(f"/api/employee-support/requests/{request_id}/close", headers=admin_headers)
        resp = client.post(
            f"/api/support/{request_id}/messages", headers=customer_headers, json={"message": "Hello?"}
        )
        assert resp.status_code == 400

    def test_employees_cannot_open_requests(self, client, admin_headers, order_id):
        resp = client.post("/api/support", headers=admin_headers, json={
            "subject": "Staff", "message": "Staff cannot open these", "orderId": order_id,
        })
        assert resp.status_code == 403


class TestEmployeeSide:

    def test_list_with_status_filter(self, client, support_headers, request_id):
        all_requests = client.get("/api/employee-support/requests", headers=support_headers).get_json()
        assert [r["id"] for r in all_requests] == [request_id]
        assert all_requests[0]["userUsername"] == "alice"

        processing = client.get(
            "/api/employee-support/requests?status=PROCESSING", headers=support_headers
        ).get_json()
        assert processing == []

    def test_take_assigns_agent(self, client, support_headers, request_id, staff):
        resp = client.patch(f"/api/employee-support/requests/{request_id}/take", headers=support_headers)
        assert resp.status_code == 200
        taken = resp.get_json()["request"]
        assert taken["status"] == REQUEST_PROCESSING
        assert taken["employeeId"] == staff["helper"]
        assert taken["employeeUsername"] == "helper"
        assert taken["takenAt"]

    def test_take_missing_request_is_404(self, client, support_headers):
        resp = client.patch("/api/employee-support/requests/999999/take", headers=support_headers)
        assert resp.status_code == 404

    def test_cannot_take_completed_request(self, client, support_headers, admin_headers, request_id):
        client.patch(f"/api/employee-support/requests/{request_id}/close", headers=admin_headers)
        resp = client.patch(f"/api/employee-support/requests/{request_id}/take", headers=support_headers)
        assert resp.status_code == 400

    def test_assigned_agent_replies(self, client, support_headers, request_id):
        client.patch(f"/api/employee-support/requests/{request_id}/take", headers=support_headers)
        resp = client.post(
            f"/api/employee-support/requests/{request_id}/messages",
            headers=support_headers,
            json={"message": "Please try again now"},
        )
        assert resp.status_code == 201

        chat = client.get(
            f"/api/employee-support/requests/{request_id}/messages", headers=support_headers
        ).get_json()
        assert [m["senderUsername"] for m in chat] == ["alice", "helper"]

    def test_unassigned_agent_cannot_reply(self, client, support_headers, request_id):
        resp = client.post(
            f"/api/employee-support/requests/{request_id}/messages",
            headers=support_headers,
            json={"message": "Not mine yet"},
        )
        assert resp.status_code == 403

    def test_admin_can_reply_without_taking(self, client, admin_headers, request_id):
        resp = client.post(
            f"/api/employee-support/requests/{request_id}/messages",
            headers=admin_headers,
            json={"message": "Admin here"},
        )
        assert resp.status_code == 201

    def test_no_replies_after_close(self, client, support_headers, admin_headers, request_id):
        client.patch(f"/api/employee-support/requests/{request_id}/take", headers=support_headers)
        client.patch(f"/api/employee-support/requests/{request_id}/close", headers=admin_headers)
        resp = client.post(
            f"/api/employee-support/requests/{request_id}/messages",
            headers=support_headers,
            json={"message": "Too late"},
        )
        assert resp.status_code == 403

    def test_admin_closes_request(self, client, admin_headers, customer_headers, request_id):
        resp = client.patch(f"/api/employee-support/requests/{request_id}/close", headers=admin_headers)
        assert resp.status_code == 200
        closed = resp.get_json()["request"]
        assert closed["status"] == REQUEST_COMPLETED
        assert closed["closedAt"]

        mine = client.get("/api/support", headers=customer_headers).get_json()
        assert mine[0]["status"] == REQUEST_COMPLETED

    def test_support_agent_cannot_close(self, client, support_headers, request_id):
        resp = client.patch(f"/api/employee-support/requests/{request_id}/close", headers=support_headers)
        assert resp.status_code == 403

    @pytest.mark.parametrize("headers_fixture", ["moderator_headers", "analyst_headers", "customer_headers"])
    def test_other_roles_are_403(self, client, request, headers_fixture):
        headers = request.getfixturevalue(headers_fixture)
        resp = client.get("/api/employee-support/requests", headers=headers)
        assert resp.status_code == 403
