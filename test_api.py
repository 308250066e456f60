"""
API Tests

Drives the FastAPI app with TestClient. The authentication middleware is
replaced by a dependency override that supplies the principal, and the
database path points at a seeded temporary file.
"""

import pytest
from fastapi.testclient import TestClient

from access import db
from api.dependencies import get_db_path, get_principal
from api.server import create_app


@pytest.fixture
def app(db_path, ids):
    app = create_app()
    app.dependency_overrides[get_db_path] = lambda: db_path
    return app


@pytest.fixture
def as_role(app, principals):
    """Return a client acting as one of the seeded principals."""
    def make(role_key: str) -> TestClient:
        principal = principals[role_key]
        app.dependency_overrides[get_principal] = lambda: principal
        return TestClient(app)
    return make


def bale_payload(container_id: str, **overrides) -> dict:
    payload = {
        "container_id": container_id,
        "bale_number": 7,
        "bale_id_display": "B-007",
        "weight_kg": 395.0,
        "moisture_pct": 13.5,
        "color": "GREEN",
        "stems": "MED",
        "wetness": "DRY",
        "decision": "ACCEPT",
    }
    payload.update(overrides)
    return payload


class TestHealth:

    def test_healthy_with_database(self, app):
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["services"]["database"] == "up"

    def test_degraded_without_database(self, app, tmp_path):
        app.dependency_overrides[get_db_path] = lambda: tmp_path / "absent.db"

        response = TestClient(app).get("/health")
        assert response.json()["status"] == "degraded"

    def test_live(self, app):
        assert TestClient(app).get("/live").json() == {"status": "alive"}


class TestAuthentication:

    def test_missing_principal_is_401(self, app, ids):
        response = TestClient(app).get(f"/access/purchase_order/{ids['po_a']}")
        assert response.status_code == 401


class TestAccessEndpoint:

    def test_allowed_returns_chain(self, as_role, ids):
        response = as_role("customer").get(f"/access/container/{ids['container_a']}")

        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == "ALLOW"
        assert body["chain"]["po_id"] == ids["po_a"]

    def test_cross_tenant_and_missing_look_the_same(self, as_role, ids):
        client = as_role("supervisor_b")

        foreign = client.get(f"/access/shipment/{ids['shipment_a']}")
        missing = client.get("/access/shipment/does-not-exist")

        assert foreign.status_code == missing.status_code == 404
        assert foreign.json() == missing.json()
        assert foreign.json() == {"error": {"message": "Shipment not found", "code": "NOT_FOUND"}}

    def test_unassigned_is_403(self, as_role, ids):
        response = as_role("supplier").get(f"/access/purchase_order/{ids['po_a']}")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_store_failure_is_503(self, app, as_role, tmp_path):
        client = as_role("supervisor")
        app.dependency_overrides[get_db_path] = lambda: tmp_path / "gone" / "hayqc.db"

        response = client.get("/access/purchase_order/po-1")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "LOOKUP_ERROR"

    def test_unknown_entity_type_is_422(self, as_role):
        assert as_role("supervisor").get("/access/invoice/x").status_code == 422


class TestGradingEndpoint:

    def test_preview(self, as_role):
        response = as_role("inspector").post("/grading/preview", json={
            "moisture_pct": 31,
            "color": "BROWN",
            "wetness": "DAMP",
        })

        assert response.status_code == 200
        assert response.json() == {"grade": "D", "rule": 3, "reason": "Moisture above 30%"}


class TestBaleEndpoints:

    def test_create_and_read(self, as_role, ids):
        created = as_role("inspector").post("/bales", json=bale_payload(ids["container_a"], grade="D"))

        assert created.status_code == 201
        bale = created.json()
        assert bale["grade"] == "A"
        assert bale["po_id"] == ids["po_a"]

        fetched = as_role("customer").get(f"/bales/{bale['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["bale_id_display"] == "B-007"

    def test_customer_cannot_create(self, as_role, ids):
        response = as_role("customer").post("/bales", json=bale_payload(ids["container_a"]))
        assert response.status_code == 403

    def test_decision_mismatch_is_422(self, as_role, ids):
        response = as_role("inspector").post(
            "/bales", json=bale_payload(ids["container_a"], contamination=True)
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DECISION_GRADE_MISMATCH"

    def test_duplicate_is_409(self, as_role, ids):
        client = as_role("inspector")
        assert client.post("/bales", json=bale_payload(ids["container_a"])).status_code == 201

        response = client.post("/bales", json=bale_payload(ids["container_a"]))
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE_BALE"

    def test_update_and_delete(self, as_role, bale_a):
        client = as_role("supervisor")

        updated = client.put(f"/bales/{bale_a}", json={"moisture_pct": 27})
        assert updated.status_code == 200
        assert updated.json()["grade"] == "C"

        assert client.delete(f"/bales/{bale_a}").status_code == 204
        assert client.get(f"/bales/{bale_a}").status_code == 404

    def test_other_tenant_bale_is_404(self, as_role, bale_a):
        assert as_role("supervisor_b").get(f"/bales/{bale_a}").status_code == 404

    def test_null_on_required_field_is_422(self, as_role, bale_a):
        client = as_role("supervisor")

        response = client.put(f"/bales/{bale_a}", json={"color": None})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "FIELD_NOT_NULLABLE"

        cleared = client.put(f"/bales/{bale_a}", json={"notes": None, "moisture_pct": None})
        assert cleared.status_code == 200
        assert cleared.json()["moisture_pct"] is None

    def test_list_is_scoped(self, as_role, ids, bale_a, bale_b, unassigned_po):
        customer = as_role("customer").get("/bales")
        assert [b["id"] for b in customer.json()] == [bale_a]

        other = as_role("supervisor_b").get("/bales")
        assert [b["id"] for b in other.json()] == [bale_b]

        filtered = as_role("inspector").get("/bales", params={"container_id": unassigned_po["container"]})
        assert [b["id"] for b in filtered.json()] == [unassigned_po["bale"]]

        assert as_role("supervisor_b").get("/bales", params={"po_id": ids["po_a"]}).status_code == 404

    def test_bulk_create(self, as_role, ids):
        client = as_role("inspector")

        response = client.post("/bales/bulk", json={"bales": [
            bale_payload(ids["container_a"], bale_number=1, bale_id_display="B-001"),
            bale_payload(ids["container_a"], bale_number=2, bale_id_display="B-002", moisture_pct=31),
        ]})

        assert response.status_code == 201
        assert response.json()["count"] == 2
        assert [b["grade"] for b in response.json()["bales"]] == ["A", "D"]

    def test_bulk_duplicate_is_409_and_stores_nothing(self, as_role, ids):
        client = as_role("inspector")

        response = client.post("/bales/bulk", json={"bales": [
            bale_payload(ids["container_a"], bale_number=4),
            bale_payload(ids["container_a"], bale_number=4),
        ]})

        assert response.status_code == 409
        assert client.get("/bales").json() == []

    def test_bulk_empty_is_422(self, as_role):
        assert as_role("inspector").post("/bales/bulk", json={"bales": []}).status_code == 422


class TestHierarchyEndpoints:

    def test_create_chain(self, as_role):
        client = as_role("inspector")

        po = client.post("/purchase-orders", json={"po_number": "PO-3001"})
        assert po.status_code == 201

        shipment = client.post("/shipments", json={"po_id": po.json()["po_id"], "shipment_number": "S-1"})
        assert shipment.status_code == 201

        container = client.post("/containers", json={
            "shipment_id": shipment.json()["shipment_id"],
            "container_code": "C-1",
        })
        assert container.status_code == 201
        assert container.json()["po_id"] == po.json()["po_id"]

    def test_customer_po_list_excludes_unassigned(self, as_role, ids, unassigned_po):
        response = as_role("customer").get("/purchase-orders")

        assert response.status_code == 200
        assert [po["id"] for po in response.json()] == [ids["po_a"]]

    def test_other_tenant_ids_never_listed(self, as_role, ids, unassigned_po):
        body = as_role("supervisor_b").get("/purchase-orders").json()

        assert [po["id"] for po in body] == [ids["po_b"]]
        assert unassigned_po["po"] not in str(body)

    def test_read_update_delete(self, as_role, ids):
        client = as_role("supervisor")

        assert client.get(f"/purchase-orders/{ids['po_a']}").json()["status"] == "OPEN"
        assert client.get("/shipments", params={"po_id": ids["po_a"]}).json()[0]["id"] == ids["shipment_a"]
        assert client.get(f"/containers/{ids['container_a']}").json()["shipment_id"] == ids["shipment_a"]

        updated = client.put(f"/shipments/{ids['shipment_a']}", json={"status": "DELIVERED"})
        assert updated.status_code == 200
        assert updated.json()["status"] == "DELIVERED"

        assert client.delete(f"/purchase-orders/{ids['po_a']}").status_code == 204
        assert client.get(f"/containers/{ids['container_a']}").status_code == 404

    def test_null_po_number_is_422(self, as_role, ids):
        response = as_role("supervisor").put(f"/purchase-orders/{ids['po_a']}", json={"po_number": None})
        assert response.status_code == 422

    def test_inspector_cannot_update_or_delete(self, as_role, ids):
        client = as_role("inspector")

        assert client.put(f"/containers/{ids['container_a']}", json={"status": "ON_HOLD"}).status_code == 403
        assert client.delete(f"/shipments/{ids['shipment_a']}").status_code == 403

    def test_other_tenant_is_404(self, as_role, ids):
        client = as_role("supervisor_b")

        assert client.get(f"/purchase-orders/{ids['po_a']}").status_code == 404
        assert client.get("/containers", params={"shipment_id": ids["shipment_a"]}).status_code == 404
        assert client.delete(f"/containers/{ids['container_a']}").status_code == 404


class TestAssignmentEndpoints:

    def test_supervisor_lifecycle(self, as_role, ids):
        client = as_role("supervisor")

        created = client.post("/po-assignments", json={"po_id": ids["po_a"], "user_id": ids["supplier_a"]})
        assert created.status_code == 201

        listed = client.get("/po-assignments", params={"po_id": ids["po_a"]})
        assert {a["user_id"] for a in listed.json()} == {ids["customer_a"], ids["supplier_a"]}

        assert client.delete(f"/po-assignments/{created.json()['id']}").status_code == 204

    def test_inspector_forbidden(self, as_role):
        response = as_role("inspector").get("/po-assignments")

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Access denied. Required roles: SUPERVISOR"

    def test_unknown_stored_role_is_422(self, as_role, ids, db_path):
        admin_id = db.add_user(ids["company_a"], "admin@deserthay.example", "Ada Admin", "ADMIN",
                               db_path=db_path)

        response = as_role("supervisor").post(
            "/po-assignments", json={"po_id": ids["po_a"], "user_id": admin_id}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "ROLE_NOT_ASSIGNABLE"


class TestNoteEndpoints:

    def test_create_list_update(self, as_role, ids):
        client = as_role("customer")

        created = client.post("/po-notes", json={"po_id": ids["po_a"], "content": "Check bale 3"})
        assert created.status_code == 201

        listed = client.get("/po-notes", params={"po_id": ids["po_a"]})
        assert [n["content"] for n in listed.json()] == ["Check bale 3"]

        updated = client.put(f"/po-notes/{created.json()['id']}", json={"content": "Check bale 4"})
        assert updated.json()["content"] == "Check bale 4"

    def test_delete(self, as_role, ids):
        created = as_role("customer").post("/po-notes", json={"po_id": ids["po_a"], "content": "Typo"})
        note_id = created.json()["id"]

        assert as_role("inspector").delete(f"/po-notes/{note_id}").status_code == 403
        assert as_role("customer").delete(f"/po-notes/{note_id}").status_code == 204
        assert as_role("customer").get("/po-notes", params={"po_id": ids["po_a"]}).json() == []


class TestUserEndpoints:

    def test_same_company(self, as_role, ids):
        response = as_role("inspector").get(f"/users/{ids['customer_a']}")
        assert response.status_code == 200
        assert response.json()["role"] == "CUSTOMER"

    def test_other_company_is_404(self, as_role, ids):
        assert as_role("inspector").get(f"/users/{ids['supervisor_b']}").status_code == 404

    def test_unknown_stored_role_is_422(self, as_role, ids, db_path):
        admin_id = db.add_user(ids["company_a"], "admin@deserthay.example", "Ada Admin", "ADMIN",
                               db_path=db_path)

        response = as_role("supervisor").get(f"/users/{admin_id}")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "UNKNOWN_ROLE"


class TestRequestLogging:

    def test_request_id_echoed(self, app):
        response = TestClient(app).get("/live", headers={"X-Request-ID": "req-abc"})
        assert response.headers["X-Request-ID"] == "req-abc"

    def test_request_id_generated(self, app):
        response = TestClient(app).get("/live")
        assert len(response.headers["X-Request-ID"]) == 36
