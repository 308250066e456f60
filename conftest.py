"""Shared pytest fixtures: a seeded two-tenant database and principals."""

from typing import Any, Dict

import pytest

from access import (
    Principal,
    Role,
    SQLiteOwnershipLoader,
    TenantAccessResolver,
    seed_sample_data,
)
from access import db


@pytest.fixture
def db_path(tmp_path):
    """Fresh database file per test."""
    return tmp_path / "hayqc.db"


@pytest.fixture
def ids(db_path) -> Dict[str, str]:
    """Seed two companies and return their well-known IDs."""
    return seed_sample_data(db_path)


@pytest.fixture
def resolver(db_path) -> TenantAccessResolver:
    return TenantAccessResolver(SQLiteOwnershipLoader(db_path))


@pytest.fixture
def principals(ids) -> Dict[str, Principal]:
    """One principal per seeded user, keyed by role (company A) or 'supervisor_b'."""
    a = ids["company_a"]
    return {
        "supervisor": Principal(user_id=ids["supervisor_a"], company_id=a, role=Role.SUPERVISOR),
        "inspector": Principal(user_id=ids["inspector_a"], company_id=a, role=Role.INSPECTOR),
        "customer": Principal(user_id=ids["customer_a"], company_id=a, role=Role.CUSTOMER),
        "supplier": Principal(user_id=ids["supplier_a"], company_id=a, role=Role.SUPPLIER),
        "supervisor_b": Principal(
            user_id=ids["supervisor_b"], company_id=ids["company_b"], role=Role.SUPERVISOR
        ),
    }


def bale_values(ids: Dict[str, str], suffix: str = "a", **overrides: Any) -> Dict[str, Any]:
    """Row values for a graded bale in one of the seeded containers."""
    values = {
        "container_id": ids[f"container_{suffix}"],
        "shipment_id": ids[f"shipment_{suffix}"],
        "po_id": ids[f"po_{suffix}"],
        "inspector_id": ids["inspector_a"] if suffix == "a" else ids["supervisor_b"],
        "bale_number": 1,
        "bale_id_display": "B-001",
        "weight_kg": 410.5,
        "moisture_pct": 12.0,
        "color": "GREEN",
        "stems": "LOW",
        "wetness": "DRY",
        "grade": "A",
        "decision": "ACCEPT",
    }
    values.update(overrides)
    return values


@pytest.fixture
def bale_a(ids, db_path) -> str:
    """A bale in company A's container."""
    return db.add_bale(bale_values(ids, "a"), db_path=db_path)


@pytest.fixture
def bale_b(ids, db_path) -> str:
    """A bale in company B's container."""
    return db.add_bale(bale_values(ids, "b"), db_path=db_path)


@pytest.fixture
def unassigned_po(ids, db_path) -> Dict[str, str]:
    """A second company A PO, with a shipment, container and bale, that nobody is assigned to."""
    po_id = db.add_purchase_order(ids["company_a"], "PO-1002", db_path=db_path)
    shipment_id = db.add_shipment(po_id, "SHP-2", db_path=db_path)
    container_id = db.add_container(shipment_id, "MSKU7777777", db_path=db_path)
    bale_id = db.add_bale(
        bale_values(ids, "a", container_id=container_id, shipment_id=shipment_id, po_id=po_id,
                    bale_number=2, bale_id_display="B-002"),
        db_path=db_path,
    )
    return {"po": po_id, "shipment": shipment_id, "container": container_id, "bale": bale_id}
