"""Tests for the order HTTP endpoints mounted under /orders."""

import dataclasses

import pytest
from sqlalchemy.exc import OperationalError

from services.order_service.main import order_app
from services.order_service.repository import OrderRepository
from shared.config.database import AsyncSessionLocal


class CountingSessionFactory:
    """Session factory that counts how many sessions the handlers open."""

    def __init__(self, factory):
        self.factory = factory
        self.opened = 0

    def __call__(self):
        self.opened += 1
        return self.factory()


@pytest.fixture
def create_order(client, auth_headers, order_payload):
    async def _create(**overrides) -> dict:
        response = await client.post("/orders/", json=order_payload(**overrides), headers=auth_headers())
        assert response.status_code == 201, response.text
        return response.json()

    return _create


class TestCreateOrderEndpoint:
    async def test_creates_pending_order(self, client, auth_headers, order_payload):
        response = await client.post("/orders/", json=order_payload(), headers=auth_headers())

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "Pending"
        assert len(data["status_history"]) == 1
        assert data["status_history"][0]["comments"] == "Order received and is being processed."
        assert data["items"][0]["title"] == "Roses"
        assert data["items"][0]["product_id"] == "p-roses"
        assert data["payment_method"] == "cod"
        assert data["tracking_number"] is None

    async def test_missing_fields_are_listed(self, client, auth_headers):
        response = await client.post(
            "/orders/", json={"customer_name": "Jane", "items": []}, headers=auth_headers()
        )

        assert response.status_code == 400
        assert response.json()["missing_fields"] == ["email", "address", "phone", "items", "total"]

    async def test_malformed_body_is_a_client_error(self, client, auth_headers, order_payload):
        response = await client.post(
            "/orders/", json=order_payload(payment_method="bitcoin"), headers=auth_headers()
        )

        assert response.status_code == 400
        assert "payment_method" in response.json()["invalid_fields"]

    async def test_requires_authentication(self, client, order_payload):
        response = await client.post("/orders/", json=order_payload())
        assert response.status_code == 401


class TestUpdateStatusEndpoint:
    async def test_ship_with_tracking_number(self, client, create_order, sink):
        order = await create_order()

        response = await client.put(
            f"/orders/{order['id']}/status",
            json={"status": "Shipped", "tracking_number": "TRACK123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Shipped"
        assert data["tracking_number"] == "TRACK123"
        assert [e["status"] for e in data["status_history"]] == ["Pending", "Shipped"]
        assert data["status_history"][-1]["updated_by"] is None
        assert len(sink.payloads) == 1
        assert "has been shipped. Tracking number: TRACK123" in sink.payloads[0].message

    async def test_authenticated_update_records_the_actor(self, client, create_order, auth_headers):
        order = await create_order()

        response = await client.put(
            f"/orders/{order['id']}/status",
            json={"status": "Processing", "comment": "Packing now"},
            headers=auth_headers("admin-1"),
        )

        entry = response.json()["status_history"][-1]
        assert entry["updated_by"] == "admin-1"
        assert entry["comments"] == "Packing now"

    async def test_invalid_status_echoes_valid_options(self, client, create_order, sink):
        order = await create_order()

        response = await client.put(f"/orders/{order['id']}/status", json={"status": "Lost"})

        assert response.status_code == 400
        assert response.json()["valid_options"] == [
            "Pending", "Processing", "Shipped", "Out for Delivery", "Delivered", "Cancelled",
        ]
        assert sink.payloads == []

    async def test_unknown_order_is_404(self, client):
        response = await client.put("/orders/does-not-exist/status", json={"status": "Shipped"})
        assert response.status_code == 404

    async def test_notification_failure_is_invisible_to_the_caller(
        self, client, create_order, order_context, failing_sink
    ):
        order = await create_order()
        order_app.state.context = dataclasses.replace(order_context, notification_sink=failing_sink)

        response = await client.put(f"/orders/{order['id']}/status", json={"status": "Delivered"})

        assert response.status_code == 200
        assert response.json()["status"] == "Delivered"
        assert len(response.json()["status_history"]) == 2
        assert len(failing_sink.payloads) == 1

    async def test_redundant_update_returns_order_unchanged(self, client, create_order, sink):
        order = await create_order()

        response = await client.put(f"/orders/{order['id']}/status", json={"status": "Pending"})

        assert response.status_code == 200
        history = response.json()["status_history"]
        assert [(e["status"], e["comments"]) for e in history] == [
            (e["status"], e["comments"]) for e in order["status_history"]
        ]
        assert sink.payloads == []

    async def test_storage_failure_is_an_opaque_server_error(self, client, create_order, sink, monkeypatch):
        order = await create_order()

        async def failing_save(session, entity):
            session.add(entity)
            await session.flush()
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(OrderRepository, "save", staticmethod(failing_save))

        response = await client.put(f"/orders/{order['id']}/status", json={"status": "Shipped"})

        assert response.status_code == 500
        assert response.json() == {"message": "Failed to update order status"}
        assert "disk" not in response.text
        assert sink.payloads == []

        reloaded = (await client.get(f"/orders/{order['id']}")).json()
        assert reloaded["status"] == "Pending"
        assert len(reloaded["status_history"]) == 1


class TestReadEndpoints:
    async def test_get_order_includes_parsed_shipping_address(self, client, create_order):
        order = await create_order()

        response = await client.get(f"/orders/{order['id']}")

        assert response.status_code == 200
        assert response.json()["shipping_address"] == {
            "street": "12 Rose Lane",
            "city": "Pune",
            "state": "Maharashtra",
            "zip_code": "411001",
            "country": "India",
        }

    async def test_get_unknown_order(self, client):
        response = await client.get("/orders/does-not-exist")
        assert response.status_code == 404

    async def test_list_all_requires_internal_key(self, client):
        response = await client.get("/orders/")
        assert response.status_code == 403

    async def test_list_all_newest_first(self, client, create_order, internal_headers):
        first = await create_order(customer_name="First")
        second = await create_order(customer_name="Second")

        response = await client.get("/orders/", headers=internal_headers)

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [second["id"], first["id"]]

    async def test_list_filtered_by_invalid_status(self, client, internal_headers):
        response = await client.get("/orders/", params={"status": "Lost"}, headers=internal_headers)
        assert response.status_code == 400

    async def test_list_user_orders(self, client, create_order, auth_headers):
        mine = await create_order(user_id="user-1")
        await create_order(user_id="user-2")

        response = await client.get("/orders/user/user-1", headers=auth_headers("user-1"))

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [mine["id"]]

    async def test_health(self, client):
        response = await client.get("/orders/health")
        assert response.json() == {"service": "order", "status": "running"}

    async def test_sessions_come_from_the_app_context(self, client, create_order, order_context):
        order = await create_order()
        sessions = CountingSessionFactory(AsyncSessionLocal)
        order_app.state.context = dataclasses.replace(order_context, session_factory=sessions)

        response = await client.get(f"/orders/{order['id']}")

        assert response.status_code == 200
        assert sessions.opened == 1

    async def test_metrics_are_exposed(self, client, create_order):
        await create_order()

        response = await client.get("/orders/metrics")

        assert response.status_code == 200
        assert "http_request_duration_seconds" in response.text
        assert 'ecomm_orders_created_total{payment_method="cod"}' in response.text
