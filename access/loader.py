"""Ownership Chain Loaders.

The resolver reads ownership through the OwnershipLoader protocol. Each
method answers in one logical lookup and never writes. A missing entity
is None (or False for assignments); a store failure is an
OwnershipLookupError, never None.

SQLiteOwnershipLoader implements the protocol with one JOIN per call.
"""

import sqlite3
from pathlib import Path
from typing import Optional, Protocol

from access.db import connect
from access.errors import OwnershipLookupError
from access.models import OwnershipChain
from core.config import DEFAULT_DB_PATH


class OwnershipLoader(Protocol):
    """Protocol for ownership and assignment reads."""

    def load_po_ownership(self, po_id: str) -> Optional[OwnershipChain]:
        ...

    def load_shipment_ownership(self, shipment_id: str) -> Optional[OwnershipChain]:
        ...

    def load_container_ownership(self, container_id: str) -> Optional[OwnershipChain]:
        ...

    def load_bale_ownership(self, bale_id: str) -> Optional[OwnershipChain]:
        ...

    def load_assignment(self, po_id: str, user_id: str) -> bool:
        ...

    def load_user_company(self, user_id: str) -> Optional[str]:
        ...


_PO_SQL = """
    SELECT p.company_id, p.id AS po_id
    FROM purchase_order p
    WHERE p.id = ?
"""

_SHIPMENT_SQL = """
    SELECT p.company_id, p.id AS po_id, s.id AS shipment_id
    FROM shipment s
    JOIN purchase_order p ON p.id = s.po_id
    WHERE s.id = ?
"""

_CONTAINER_SQL = """
    SELECT p.company_id, p.id AS po_id, s.id AS shipment_id, c.id AS container_id
    FROM container c
    JOIN shipment s ON s.id = c.shipment_id
    JOIN purchase_order p ON p.id = s.po_id
    WHERE c.id = ?
"""

# Bale carries po_id/shipment_id denormalized; walking the live chain keeps
# the company check independent of those copies.
_BALE_SQL = """
    SELECT p.company_id, p.id AS po_id, s.id AS shipment_id,
           c.id AS container_id, b.id AS bale_id
    FROM bale b
    JOIN container c ON c.id = b.container_id
    JOIN shipment s ON s.id = c.shipment_id
    JOIN purchase_order p ON p.id = s.po_id
    WHERE b.id = ?
"""


class SQLiteOwnershipLoader:
    """Ownership loader backed by the HayQC SQLite database.

    Opens a connection per call, so one instance can be shared across
    threads.
    """

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = db_path

    def _fetch_one(self, operation: str, sql: str, params: tuple) -> Optional[sqlite3.Row]:
        try:
            conn = connect(self.db_path)
            try:
                return conn.execute(sql, params).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise OwnershipLookupError(operation, e) from e

    def _load_chain(self, operation: str, sql: str, entity_id: str) -> Optional[OwnershipChain]:
        row = self._fetch_one(operation, sql, (entity_id,))
        if row is None:
            return None
        return OwnershipChain(**dict(row))

    def load_po_ownership(self, po_id: str) -> Optional[OwnershipChain]:
        return self._load_chain("load_po_ownership", _PO_SQL, po_id)

    def load_shipment_ownership(self, shipment_id: str) -> Optional[OwnershipChain]:
        return self._load_chain("load_shipment_ownership", _SHIPMENT_SQL, shipment_id)

    def load_container_ownership(self, container_id: str) -> Optional[OwnershipChain]:
        return self._load_chain("load_container_ownership", _CONTAINER_SQL, container_id)

    def load_bale_ownership(self, bale_id: str) -> Optional[OwnershipChain]:
        return self._load_chain("load_bale_ownership", _BALE_SQL, bale_id)

    def load_assignment(self, po_id: str, user_id: str) -> bool:
        row = self._fetch_one(
            "load_assignment",
            "SELECT 1 FROM po_user_assignment WHERE po_id = ? AND user_id = ?",
            (po_id, user_id),
        )
        return row is not None

    def load_user_company(self, user_id: str) -> Optional[str]:
        row = self._fetch_one(
            "load_user_company",
            "SELECT company_id FROM app_user WHERE id = ?",
            (user_id,),
        )
        return row["company_id"] if row else None
