"""HayQC Database Operations.

This module handles all database operations for the QC hierarchy:
- Schema initialization
- Insert/read helpers for companies, users, POs, shipments, containers,
  bales, PO assignments and PO notes
- Sample data seeding

Ownership reads used by the access resolver live in access.loader.
"""

import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.config import DEFAULT_DB_PATH


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS company (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS app_user (
        id TEXT PRIMARY KEY,
        company_id TEXT NOT NULL REFERENCES company(id),
        email TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        role TEXT NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS purchase_order (
        id TEXT PRIMARY KEY,
        company_id TEXT NOT NULL REFERENCES company(id),
        po_number TEXT NOT NULL,
        customer_name TEXT,
        status TEXT NOT NULL DEFAULT 'OPEN',
        created_at TEXT NOT NULL,
        UNIQUE(company_id, po_number)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS shipment (
        id TEXT PRIMARY KEY,
        po_id TEXT NOT NULL REFERENCES purchase_order(id) ON DELETE CASCADE,
        shipment_number TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'PENDING',
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS container (
        id TEXT PRIMARY KEY,
        shipment_id TEXT NOT NULL REFERENCES shipment(id) ON DELETE CASCADE,
        container_code TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'PENDING',
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS bale (
        id TEXT PRIMARY KEY,
        container_id TEXT NOT NULL REFERENCES container(id) ON DELETE CASCADE,
        shipment_id TEXT NOT NULL REFERENCES shipment(id) ON DELETE CASCADE,
        po_id TEXT NOT NULL REFERENCES purchase_order(id) ON DELETE CASCADE,
        inspector_id TEXT NOT NULL REFERENCES app_user(id),
        bale_number INTEGER NOT NULL,
        bale_id_display TEXT NOT NULL,
        weight_kg REAL NOT NULL,
        moisture_pct REAL,
        color TEXT NOT NULL,
        stems TEXT NOT NULL,
        wetness TEXT NOT NULL,
        contamination INTEGER NOT NULL DEFAULT 0,
        mixed_material INTEGER NOT NULL DEFAULT 0,
        mold INTEGER NOT NULL DEFAULT 0,
        grade TEXT NOT NULL,
        decision TEXT NOT NULL,
        reject_reason TEXT,
        notes TEXT,
        created_at TEXT NOT NULL,
        UNIQUE(container_id, bale_number)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS po_user_assignment (
        id TEXT PRIMARY KEY,
        po_id TEXT NOT NULL REFERENCES purchase_order(id) ON DELETE CASCADE,
        user_id TEXT NOT NULL REFERENCES app_user(id),
        created_at TEXT NOT NULL,
        UNIQUE(po_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS po_note (
        id TEXT PRIMARY KEY,
        po_id TEXT NOT NULL REFERENCES purchase_order(id) ON DELETE CASCADE,
        user_id TEXT NOT NULL REFERENCES app_user(id),
        content TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_po_company ON purchase_order(company_id)",
    "CREATE INDEX IF NOT EXISTS idx_shipment_po ON shipment(po_id)",
    "CREATE INDEX IF NOT EXISTS idx_container_shipment ON container(shipment_id)",
    "CREATE INDEX IF NOT EXISTS idx_bale_container ON bale(container_id)",
    "CREATE INDEX IF NOT EXISTS idx_note_po ON po_note(po_id)",
]

BALE_FLAGS = ("contamination", "mixed_material", "mold")


def connect(db_path: Path = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Open a connection with row access by name and foreign keys enforced."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: Path = DEFAULT_DB_PATH) -> None:
    """Initialize all HayQC tables and indexes.

    Args:
        db_path: Path to SQLite database file
    """
    conn = connect(db_path)
    try:
        cursor = conn.cursor()
        for statement in SCHEMA:
            cursor.execute(statement)
        conn.commit()
    finally:
        conn.close()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.utcnow().isoformat()


def _insert_row(conn: sqlite3.Connection, table: str, values: Dict[str, Any]) -> str:
    values = dict(values)
    values.setdefault("id", _new_id())
    values.setdefault("created_at", _now())

    columns = ", ".join(values)
    placeholders = ", ".join("?" for _ in values)
    conn.execute(
        f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
        tuple(values.values()),
    )
    return values["id"]


def _insert(db_path: Path, table: str, values: Dict[str, Any]) -> str:
    """Insert a row and return its ID (generated if not supplied)."""
    conn = connect(db_path)
    try:
        row_id = _insert_row(conn, table, values)
        conn.commit()
        return row_id
    finally:
        conn.close()


# =============================================================================
# Insert Helpers
# =============================================================================

def add_company(name: str, company_id: Optional[str] = None,
                db_path: Path = DEFAULT_DB_PATH) -> str:
    """Add a company (tenant). Returns its ID."""
    values = {"name": name}
    if company_id:
        values["id"] = company_id
    return _insert(db_path, "company", values)


def add_user(
    company_id: str,
    email: str,
    name: str,
    role: str,
    is_active: bool = True,
    user_id: Optional[str] = None,
    db_path: Path = DEFAULT_DB_PATH,
) -> str:
    """Add a user to a company. Returns its ID."""
    values = {
        "company_id": company_id,
        "email": email,
        "name": name,
        "role": role,
        "is_active": int(is_active),
    }
    if user_id:
        values["id"] = user_id
    return _insert(db_path, "app_user", values)


def add_purchase_order(company_id: str, po_number: str,
                       customer_name: Optional[str] = None,
                       po_id: Optional[str] = None,
                       db_path: Path = DEFAULT_DB_PATH) -> str:
    """Add a purchase order. Returns its ID."""
    values = {"company_id": company_id, "po_number": po_number,
              "customer_name": customer_name}
    if po_id:
        values["id"] = po_id
    return _insert(db_path, "purchase_order", values)


def add_shipment(po_id: str, shipment_number: str,
                 shipment_id: Optional[str] = None,
                 db_path: Path = DEFAULT_DB_PATH) -> str:
    """Add a shipment under a PO. Returns its ID."""
    values = {"po_id": po_id, "shipment_number": shipment_number}
    if shipment_id:
        values["id"] = shipment_id
    return _insert(db_path, "shipment", values)


def add_container(shipment_id: str, container_code: str,
                  container_id: Optional[str] = None,
                  db_path: Path = DEFAULT_DB_PATH) -> str:
    """Add a container under a shipment. Returns its ID."""
    values = {"shipment_id": shipment_id, "container_code": container_code}
    if container_id:
        values["id"] = container_id
    return _insert(db_path, "container", values)


def add_bale(values: Dict[str, Any], db_path: Path = DEFAULT_DB_PATH) -> str:
    """Insert a bale row.

    The caller supplies shipment_id/po_id already recomputed from the
    container's ownership chain.

    Raises:
        sqlite3.IntegrityError: On duplicate bale number within a container
    """
    return _insert(db_path, "bale", _encode_bale(values))


def add_bales(rows: List[Dict[str, Any]], db_path: Path = DEFAULT_DB_PATH) -> List[str]:
    """Insert several bales in one transaction. Returns their IDs in order.

    Either every bale is stored or none is.

    Raises:
        sqlite3.IntegrityError: On any duplicate bale number
    """
    conn = connect(db_path)
    try:
        ids = [_insert_row(conn, "bale", _encode_bale(values)) for values in rows]
        conn.commit()
        return ids
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


def _encode_bale(values: Dict[str, Any]) -> Dict[str, Any]:
    values = dict(values)
    for flag in BALE_FLAGS:
        values[flag] = int(bool(values.get(flag, False)))
    return values


def add_assignment(po_id: str, user_id: str,
                   db_path: Path = DEFAULT_DB_PATH) -> str:
    """Grant a user visibility into a PO.

    Raises:
        sqlite3.IntegrityError: If the (po_id, user_id) pair already exists
    """
    return _insert(db_path, "po_user_assignment", {"po_id": po_id, "user_id": user_id})


def add_note(po_id: str, user_id: str, content: str,
             db_path: Path = DEFAULT_DB_PATH) -> str:
    """Add a note to a PO. Returns its ID."""
    now = _now()
    return _insert(db_path, "po_note", {
        "po_id": po_id,
        "user_id": user_id,
        "content": content,
        "created_at": now,
        "updated_at": now,
    })


# =============================================================================
# Read / Update / Delete Helpers
# =============================================================================

def _fetch_one(db_path: Path, sql: str, params: tuple) -> Optional[Dict[str, Any]]:
    conn = connect(db_path)
    try:
        row = conn.execute(sql, params).fetchone()
        return dict(row) if row else None
    finally:
        conn.close()


def _fetch_all(db_path: Path, sql: str, params: tuple) -> List[Dict[str, Any]]:
    conn = connect(db_path)
    try:
        return [dict(row) for row in conn.execute(sql, params).fetchall()]
    finally:
        conn.close()


def _execute(db_path: Path, sql: str, params: tuple) -> int:
    """Run a write statement and return the affected row count."""
    conn = connect(db_path)
    try:
        cursor = conn.execute(sql, params)
        conn.commit()
        return cursor.rowcount
    finally:
        conn.close()


def get_user(user_id: str, db_path: Path = DEFAULT_DB_PATH) -> Optional[Dict[str, Any]]:
    """Get a user row by ID."""
    return _fetch_one(db_path, "SELECT * FROM app_user WHERE id = ?", (user_id,))


def _update(db_path: Path, table: str, row_id: str, fields: Dict[str, Any]) -> bool:
    """Overwrite the given columns of one row. Returns True if it existed."""
    if not fields:
        return _fetch_one(db_path, f"SELECT id FROM {table} WHERE id = ?", (row_id,)) is not None
    assignments = ", ".join(f"{column} = ?" for column in fields)
    return _execute(
        db_path,
        f"UPDATE {table} SET {assignments} WHERE id = ?",
        (*fields.values(), row_id),
    ) > 0


def _delete(db_path: Path, table: str, row_id: str) -> bool:
    return _execute(db_path, f"DELETE FROM {table} WHERE id = ?", (row_id,)) > 0


def get_purchase_order(po_id: str, db_path: Path = DEFAULT_DB_PATH) -> Optional[Dict[str, Any]]:
    """Get a purchase order row by ID."""
    return _fetch_one(db_path, "SELECT * FROM purchase_order WHERE id = ?", (po_id,))


def list_purchase_orders(
    company_id: str,
    status: Optional[str] = None,
    assigned_user_id: Optional[str] = None,
    db_path: Path = DEFAULT_DB_PATH,
) -> List[Dict[str, Any]]:
    """List a company's purchase orders, newest first.

    With assigned_user_id, only POs that user is assigned to are returned.
    """
    sql = "SELECT p.* FROM purchase_order p WHERE p.company_id = ?"
    params: list = [company_id]
    if status:
        sql += " AND p.status = ?"
        params.append(status)
    if assigned_user_id:
        sql += """
            AND EXISTS (SELECT 1 FROM po_user_assignment a
                        WHERE a.po_id = p.id AND a.user_id = ?)
        """
        params.append(assigned_user_id)
    sql += " ORDER BY p.created_at DESC"
    return _fetch_all(db_path, sql, tuple(params))


def update_purchase_order(po_id: str, fields: Dict[str, Any],
                          db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Update PO columns.

    Raises:
        sqlite3.IntegrityError: If the new PO number is taken in the company
    """
    return _update(db_path, "purchase_order", po_id, fields)


def delete_purchase_order(po_id: str, db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Delete a PO together with its shipments, containers, bales, assignments and notes."""
    return _delete(db_path, "purchase_order", po_id)


def get_shipment(shipment_id: str, db_path: Path = DEFAULT_DB_PATH) -> Optional[Dict[str, Any]]:
    return _fetch_one(db_path, "SELECT * FROM shipment WHERE id = ?", (shipment_id,))


def list_shipments(po_id: str, db_path: Path = DEFAULT_DB_PATH) -> List[Dict[str, Any]]:
    """List shipments under a PO, oldest first."""
    return _fetch_all(
        db_path, "SELECT * FROM shipment WHERE po_id = ? ORDER BY created_at", (po_id,)
    )


def update_shipment(shipment_id: str, fields: Dict[str, Any],
                    db_path: Path = DEFAULT_DB_PATH) -> bool:
    return _update(db_path, "shipment", shipment_id, fields)


def delete_shipment(shipment_id: str, db_path: Path = DEFAULT_DB_PATH) -> bool:
    return _delete(db_path, "shipment", shipment_id)


def get_container(container_id: str, db_path: Path = DEFAULT_DB_PATH) -> Optional[Dict[str, Any]]:
    return _fetch_one(db_path, "SELECT * FROM container WHERE id = ?", (container_id,))


def list_containers(shipment_id: str, db_path: Path = DEFAULT_DB_PATH) -> List[Dict[str, Any]]:
    """List containers in a shipment, oldest first."""
    return _fetch_all(
        db_path,
        "SELECT * FROM container WHERE shipment_id = ? ORDER BY created_at",
        (shipment_id,),
    )


def update_container(container_id: str, fields: Dict[str, Any],
                     db_path: Path = DEFAULT_DB_PATH) -> bool:
    return _update(db_path, "container", container_id, fields)


def delete_container(container_id: str, db_path: Path = DEFAULT_DB_PATH) -> bool:
    return _delete(db_path, "container", container_id)


def _decode_bale(row: Dict[str, Any]) -> Dict[str, Any]:
    for flag in BALE_FLAGS:
        row[flag] = bool(row[flag])
    return row


def get_bale(bale_id: str, db_path: Path = DEFAULT_DB_PATH) -> Optional[Dict[str, Any]]:
    """Get a bale row by ID, with boolean flags decoded."""
    row = _fetch_one(db_path, "SELECT * FROM bale WHERE id = ?", (bale_id,))
    return _decode_bale(row) if row else None


def list_bales(
    company_id: str,
    container_id: Optional[str] = None,
    shipment_id: Optional[str] = None,
    po_id: Optional[str] = None,
    inspector_id: Optional[str] = None,
    assigned_user_id: Optional[str] = None,
    limit: int = 100,
    db_path: Path = DEFAULT_DB_PATH,
) -> List[Dict[str, Any]]:
    """List bales within a company, ordered by bale number.

    Always scoped to the company through the purchase_order join. With
    assigned_user_id, only bales under POs that user is assigned to are
    returned.
    """
    sql = """
        SELECT b.* FROM bale b
        JOIN purchase_order p ON p.id = b.po_id
        WHERE p.company_id = ?
    """
    params: list = [company_id]
    for column, value in (
        ("container_id", container_id),
        ("shipment_id", shipment_id),
        ("po_id", po_id),
        ("inspector_id", inspector_id),
    ):
        if value:
            sql += f" AND b.{column} = ?"
            params.append(value)
    if assigned_user_id:
        sql += """
            AND EXISTS (SELECT 1 FROM po_user_assignment a
                        WHERE a.po_id = b.po_id AND a.user_id = ?)
        """
        params.append(assigned_user_id)
    sql += " ORDER BY b.bale_number, b.created_at LIMIT ?"
    params.append(limit)
    return [_decode_bale(row) for row in _fetch_all(db_path, sql, tuple(params))]


def update_bale_fields(bale_id: str, fields: Dict[str, Any],
                       db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Overwrite inspection columns of a bale. Returns True if it existed."""
    return _update(db_path, "bale", bale_id, fields)


def delete_bale(bale_id: str, db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Delete a bale by ID. Returns True if deleted."""
    return _delete(db_path, "bale", bale_id)


def get_assignment(assignment_id: str,
                   db_path: Path = DEFAULT_DB_PATH) -> Optional[Dict[str, Any]]:
    """Get a PO assignment row by ID."""
    return _fetch_one(
        db_path, "SELECT * FROM po_user_assignment WHERE id = ?", (assignment_id,)
    )


def list_assignments(
    company_id: str,
    po_id: Optional[str] = None,
    user_id: Optional[str] = None,
    db_path: Path = DEFAULT_DB_PATH,
) -> List[Dict[str, Any]]:
    """List PO assignments within a company, optionally filtered.

    Always scoped to the company through the purchase_order join.
    """
    sql = """
        SELECT a.* FROM po_user_assignment a
        JOIN purchase_order p ON p.id = a.po_id
        WHERE p.company_id = ?
    """
    params: list = [company_id]
    if po_id:
        sql += " AND a.po_id = ?"
        params.append(po_id)
    if user_id:
        sql += " AND a.user_id = ?"
        params.append(user_id)
    sql += " ORDER BY a.created_at"
    return _fetch_all(db_path, sql, tuple(params))


def delete_assignment(assignment_id: str, db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Delete a PO assignment by ID.

    Returns:
        True if deleted, False if not found
    """
    return _execute(
        db_path, "DELETE FROM po_user_assignment WHERE id = ?", (assignment_id,)
    ) > 0


def get_note(note_id: str, db_path: Path = DEFAULT_DB_PATH) -> Optional[Dict[str, Any]]:
    """Get a PO note row by ID."""
    return _fetch_one(db_path, "SELECT * FROM po_note WHERE id = ?", (note_id,))


def list_notes(po_id: str, db_path: Path = DEFAULT_DB_PATH) -> List[Dict[str, Any]]:
    """List notes on a PO, newest first."""
    return _fetch_all(
        db_path,
        "SELECT * FROM po_note WHERE po_id = ? ORDER BY created_at DESC",
        (po_id,),
    )


def update_note_content(note_id: str, content: str,
                        db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Replace a note's content. Returns True if the note existed."""
    return _execute(
        db_path,
        "UPDATE po_note SET content = ?, updated_at = ? WHERE id = ?",
        (content, _now(), note_id),
    ) > 0


def delete_note(note_id: str, db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Delete a PO note by ID. Returns True if deleted."""
    return _delete(db_path, "po_note", note_id)


# =============================================================================
# Sample Data Seeding
# =============================================================================

def seed_sample_data(db_path: Path = DEFAULT_DB_PATH) -> Dict[str, str]:
    """Seed two tenants with a small PO hierarchy each.

    Company "Desert Hay Traders" gets a supervisor, an inspector, an
    assigned customer and an unassigned supplier. Company "Valley Fodder"
    gets a supervisor and its own PO.

    Args:
        db_path: Path to database

    Returns:
        Dict of well-known IDs keyed by name
    """
    init_db(db_path)

    ids: Dict[str, str] = {}
    ids["company_a"] = add_company("Desert Hay Traders", db_path=db_path)
    ids["company_b"] = add_company("Valley Fodder", db_path=db_path)

    ids["supervisor_a"] = add_user(ids["company_a"], "supervisor@deserthay.example",
                                   "Sara Supervisor", "SUPERVISOR", db_path=db_path)
    ids["inspector_a"] = add_user(ids["company_a"], "inspector@deserthay.example",
                                  "Imran Inspector", "INSPECTOR", db_path=db_path)
    ids["customer_a"] = add_user(ids["company_a"], "customer@deserthay.example",
                                 "Carla Customer", "CUSTOMER", db_path=db_path)
    ids["supplier_a"] = add_user(ids["company_a"], "supplier@deserthay.example",
                                 "Sami Supplier", "SUPPLIER", db_path=db_path)
    ids["supervisor_b"] = add_user(ids["company_b"], "supervisor@valleyfodder.example",
                                   "Vera Supervisor", "SUPERVISOR", db_path=db_path)

    ids["po_a"] = add_purchase_order(ids["company_a"], "PO-1001",
                                     customer_name="Gulf Dairy", db_path=db_path)
    ids["shipment_a"] = add_shipment(ids["po_a"], "SHP-1", db_path=db_path)
    ids["container_a"] = add_container(ids["shipment_a"], "MSKU1234567", db_path=db_path)

    ids["po_b"] = add_purchase_order(ids["company_b"], "PO-2001",
                                     customer_name="Oasis Farms", db_path=db_path)
    ids["shipment_b"] = add_shipment(ids["po_b"], "SHP-1", db_path=db_path)
    ids["container_b"] = add_container(ids["shipment_b"], "TGHU7654321", db_path=db_path)

    ids["assignment_customer_a"] = add_assignment(ids["po_a"], ids["customer_a"],
                                                  db_path=db_path)

    return ids
