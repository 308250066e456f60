"""Request dependencies.

The verified principal is placed on ``request.state.principal`` by the
authentication middleware in front of this API. Everything else is built
per request from the configured database path.
"""

from pathlib import Path

from fastapi import Depends, HTTPException, Request

from access import Principal, SQLiteOwnershipLoader, TenantAccessResolver
from core.config import get_settings
from qc import AssignmentService, BaleService, HierarchyService, NoteService, UserService


def get_principal(request: Request) -> Principal:
    """Get the verified caller or fail with 401."""
    principal = getattr(request.state, "principal", None)
    if not isinstance(principal, Principal):
        raise HTTPException(status_code=401, detail="Authentication required")
    return principal


def get_db_path() -> Path:
    return get_settings().db_path


def get_resolver(db_path: Path = Depends(get_db_path)) -> TenantAccessResolver:
    return TenantAccessResolver(SQLiteOwnershipLoader(db_path))


def get_bale_service(
    resolver: TenantAccessResolver = Depends(get_resolver),
    db_path: Path = Depends(get_db_path),
) -> BaleService:
    return BaleService(resolver, db_path)


def get_hierarchy_service(
    resolver: TenantAccessResolver = Depends(get_resolver),
    db_path: Path = Depends(get_db_path),
) -> HierarchyService:
    return HierarchyService(resolver, db_path)


def get_assignment_service(
    resolver: TenantAccessResolver = Depends(get_resolver),
    db_path: Path = Depends(get_db_path),
) -> AssignmentService:
    return AssignmentService(resolver, db_path)


def get_note_service(
    resolver: TenantAccessResolver = Depends(get_resolver),
    db_path: Path = Depends(get_db_path),
) -> NoteService:
    return NoteService(resolver, db_path)


def get_user_service(
    resolver: TenantAccessResolver = Depends(get_resolver),
    db_path: Path = Depends(get_db_path),
) -> UserService:
    return UserService(resolver, db_path)
