# tests/test_routers.py
"""HTTP-level tests: the app wired to a DataService over the in-memory store."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import pytest
from datetime import date
from fastapi.testclient import TestClient
from conftest import MemoryStore, RATES
from parkdesk.main import app
from parkdesk.services.data_service import DataService
from parkdesk.services.reports import BOM


@pytest.fixture
def memory_store():
    store = MemoryStore()
    store.seed("users", id="A", name="Anna", email="a@x.pl", phone="555")
    store.seed("parking_spaces", id="s1", number="S1", type="auto-osobowe", is_occupied=True, user_id="A")
    store.seed("parking_spaces", id="s2", number="S2", type="motor", is_occupied=False, user_id=None)
    return store


@pytest.fixture
def client(memory_store):
    service = DataService(memory_store, rates=dict(RATES), match_rule="period", locale="en",
                          auto_mark_overdue=False)
    asyncio.run(service.load_all())
    app.state.data_service = service
    yield TestClient(app)
    app.state.data_service = None


class TestUsersApi:
    def test_list_and_search(self, client):
        assert [u["id"] for u in client.get("/api/v1/users").json()] == ["A"]
        assert client.get("/api/v1/users", params={"search": "zzz"}).json() == []

    def test_add_user(self, client, memory_store):
        resp = client.post("/api/v1/users", json={
            "name": "Bartek", "email": "b@x.pl",
            "vehicles": [{"brand": "Honda", "model": "CBR", "plate": "kr 77", "type": "motorcycle"}],
        })
        assert resp.status_code == 201
        assert resp.json()["vehicles"][0]["plate"] == "KR 77"
        assert list(memory_store.tables["vehicles"].values())[0]["type"] == "motor"

    def test_blank_name_rejected(self, client):
        assert client.post("/api/v1/users", json={"name": "  ", "email": "b@x.pl"}).status_code == 422

    @pytest.mark.parametrize("body", [{"name": "   "}, {"name": None}, {"email": ""}, {"email": None}])
    def test_edit_rejects_blank_or_null_name_and_email(self, client, memory_store, body):
        resp = client.put("/api/v1/users/A", json=body)
        assert resp.status_code == 422
        assert memory_store.tables["users"]["A"]["name"] == "Anna"
        assert memory_store.tables["users"]["A"]["email"] == "a@x.pl"

    def test_edit_strips_name(self, client, memory_store):
        resp = client.put("/api/v1/users/A", json={"name": "  Anna Maria "})
        assert resp.status_code == 200
        assert memory_store.tables["users"]["A"]["name"] == "Anna Maria"

    def test_delete_user_releases_space(self, client):
        assert client.delete("/api/v1/users/A").status_code == 200
        spaces = {s["id"]: s for s in client.get("/api/v1/parking-spaces").json()}
        assert spaces["s1"]["occupied"] is False
        assert spaces["s1"]["assigned_user_id"] is None

    def test_unknown_user_404(self, client):
        assert client.delete("/api/v1/users/nobody").status_code == 404

    def test_store_failure_is_502(self, client, memory_store):
        memory_store.fail("insert", "users")
        resp = client.post("/api/v1/users", json={"name": "Bartek", "email": "b@x.pl"})
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Error while adding user"


class TestParkingSpacesApi:
    def test_filter_by_occupied(self, client):
        resp = client.get("/api/v1/parking-spaces", params={"occupied": "false"})
        assert [s["number"] for s in resp.json()] == ["S2"]

    def test_assign_and_release(self, client):
        resp = client.put("/api/v1/parking-spaces/s2/assignment", json={"user_id": "A"})
        assert resp.status_code == 200
        assert resp.json()["occupied"] is True

        resp = client.put("/api/v1/parking-spaces/s2/assignment", json={"user_id": None})
        assert resp.json()["occupied"] is False and resp.json()["assigned_user_id"] is None

    def test_occupied_without_user_rejected(self, client, memory_store):
        resp = client.patch("/api/v1/parking-spaces/s2", json={"occupied": True})
        assert resp.status_code == 422
        assert memory_store.tables["parking_spaces"]["s2"]["is_occupied"] is False

    def test_contradictory_body_rejected(self, client):
        resp = client.patch("/api/v1/parking-spaces/s1", json={"occupied": False, "assigned_user_id": "A"})
        assert resp.status_code == 422

    def test_release_via_patch(self, client):
        resp = client.patch("/api/v1/parking-spaces/s1", json={"assigned_user_id": None})
        assert resp.json()["occupied"] is False

    def test_assign_unknown_user_404(self, client):
        resp = client.put("/api/v1/parking-spaces/s2/assignment", json={"user_id": "ghost"})
        assert resp.status_code == 404

    def test_patch_unknown_user_404(self, client, memory_store):
        resp = client.patch("/api/v1/parking-spaces/s2", json={"assigned_user_id": "ghost"})
        assert resp.status_code == 404
        assert memory_store.tables["parking_spaces"]["s2"]["user_id"] is None

    @pytest.mark.parametrize("body", [{"type": None}, {"number": None}, {"number": ""}, {"occupied": None}])
    def test_patch_null_fields_rejected(self, client, memory_store, body):
        resp = client.patch("/api/v1/parking-spaces/s2", json=body)
        assert resp.status_code == 422
        assert memory_store.tables["parking_spaces"]["s2"]["number"] == "S2"
        assert memory_store.tables["parking_spaces"]["s2"]["type"] == "motor"

    def test_add_and_delete(self, client):
        created = client.post("/api/v1/parking-spaces", json={"number": "S3", "type": "van"})
        assert created.status_code == 201
        assert created.json()["occupied"] is False
        assert client.delete(f"/api/v1/parking-spaces/{created.json()['id']}").status_code == 200
        assert client.delete("/api/v1/parking-spaces/missing").status_code == 404


class TestPaymentsApi:
    def test_generate_is_idempotent(self, client):
        first = client.post("/api/v1/payments/generate").json()
        second = client.post("/api/v1/payments/generate").json()

        assert first == {"processed": 1, "error": None}
        assert second == {"processed": 0, "error": None}
        payments = client.get("/api/v1/payments").json()
        assert len(payments) == 1
        assert payments[0]["status"] == "pending"
        assert payments[0]["date"] == date.today().isoformat()

    def test_mark_overdue(self, client, memory_store):
        memory_store.seed("payments", id="p1", user_id="A", amount=100, date="2000-01-01",
                          status="pending", description="Old fee")
        client.post("/api/v1/payments/generate")

        result = client.post("/api/v1/payments/mark-overdue").json()
        assert result["processed"] == 1
        assert memory_store.tables["payments"]["p1"]["status"] == "overdue"

    def test_manual_payment_and_status_change(self, client, memory_store):
        resp = client.post("/api/v1/payments", json={
            "user_id": "A", "amount": 25, "date": "2024-03-05", "description": "Key card"})
        assert resp.status_code == 201

        payment_id = next(iter(memory_store.tables["payments"]))
        resp = client.patch(f"/api/v1/payments/{payment_id}", json={"status": "paid"})
        assert resp.json()["status"] == "paid"

        summary = client.get("/api/v1/payments/summary").json()
        assert summary["paid"] == 25 and summary["counts"]["paid"] == 1

    def test_payment_for_unknown_user_404(self, client):
        resp = client.post("/api/v1/payments", json={"user_id": "ghost", "amount": 1, "description": "x"})
        assert resp.status_code == 404

    def test_negative_amount_rejected(self, client):
        resp = client.post("/api/v1/payments", json={"user_id": "A", "amount": -1, "description": "x"})
        assert resp.status_code == 422

    def test_status_filter(self, client, memory_store):
        memory_store.seed("payments", user_id="A", amount=1, date="2024-01-01", status="paid", description="a")
        memory_store.seed("payments", user_id="A", amount=2, date="2024-01-02", status="pending", description="b")
        app.state.data_service.subscribe_to_changes()
        client.post("/api/v1/changes", json={"type": "INSERT", "table": "payments"})

        assert len(client.get("/api/v1/payments", params={"status": "all"}).json()) == 2
        paid = client.get("/api/v1/payments", params={"status": "paid"}).json()
        assert [p["description"] for p in paid] == ["a"]


class TestReportsApi:
    def test_dashboard(self, client):
        stats = client.get("/api/v1/dashboard").json()
        assert stats["occupied_spaces"] == 1 and stats["total_spaces"] == 2
        assert stats["occupancy_percent"] == 50

    def test_report_json(self, client):
        body = client.get("/api/v1/reports/occupancy").json()
        assert body["columns"][0] == "Space"
        assert body["rows"][0]["User"] == "Anna"

    def test_csv_export(self, client):
        resp = client.get("/api/v1/reports/occupancy/export", params={"format": "csv"})
        assert resp.status_code == 200
        assert "attachment" in resp.headers["content-disposition"]
        assert resp.content.decode("utf-8").startswith(BOM + '"Space";"Type"')

    def test_html_export(self, client):
        resp = client.get("/api/v1/reports/payments/export", params={"format": "html"})
        assert resp.headers["content-type"].startswith("text/html")

    def test_unknown_report_and_format(self, client):
        assert client.get("/api/v1/reports/invoices").status_code == 404
        assert client.get("/api/v1/reports/payments/export", params={"format": "pdf"}).status_code == 422


class TestChangesAndHealth:
    def test_webhook_refetches_table(self, client, memory_store):
        memory_store.seed("parking_spaces", id="s3", number="S3", type="inne", is_occupied=False, user_id=None)
        resp = client.post("/api/v1/changes", json={"type": "INSERT", "table": "parking_spaces",
                                                     "record": {"id": "s3"}})
        assert resp.json() == {"status": "ok", "table": "parking_spaces", "handlers": 0}

    def test_webhook_with_subscriptions(self, client, memory_store):
        app.state.data_service.subscribe_to_changes()
        memory_store.seed("parking_spaces", id="s3", number="S3", type="inne", is_occupied=False, user_id=None)

        resp = client.post("/api/v1/changes", json={"type": "INSERT", "table": "parking_spaces"})

        assert resp.json()["handlers"] == 1
        assert len(client.get("/api/v1/parking-spaces").json()) == 3

    def test_webhook_ignores_garbage(self, client):
        assert client.post("/api/v1/changes", content=b"not json").json()["status"] == "ignored"
        assert client.post("/api/v1/changes", json={"table": "invoices"}).json()["status"] == "ignored"

    def test_health(self, client):
        body = client.get("/api/v1/health").json()
        assert body["status"] == "ok"
        assert body["collections"] == {"users": 1, "parking_spaces": 2, "payments": 0}

    def test_health_degraded_when_store_down(self, client, memory_store):
        memory_store.fail("select", "parking_spaces")
        assert client.get("/api/v1/health").json()["status"] == "degraded"

    def test_error_slot(self, client, memory_store):
        memory_store.fail("insert", "users")
        client.post("/api/v1/users", json={"name": "Bartek", "email": "b@x.pl"})
        assert client.get("/api/v1/state/error").json() == {"error": "Error while adding user"}
        client.delete("/api/v1/state/error")
        assert client.get("/api/v1/state/error").json() == {"error": None}
