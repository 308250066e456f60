"""User Workflows.

Users are visible only within their own company; another tenant's user
looks exactly like a missing one.
"""

from pathlib import Path

from access import db
from access.models import EntityType, Principal, Role
from access.resolver import TenantAccessResolver
from qc.models import UserRecord


class UserService:
    """Same-company user reads."""

    def __init__(self, resolver: TenantAccessResolver, db_path: Path):
        self.resolver = resolver
        self.db_path = db_path

    def get_user(self, principal: Principal, user_id: str) -> UserRecord:
        """Get a colleague in the principal's company.

        Raises:
            NotFoundError: User missing or in another company
            UnknownRoleError: The stored role is outside the role set
        """
        self.resolver.require_access(principal, EntityType.USER, user_id)
        row = db.get_user(user_id, db_path=self.db_path)
        row["role"] = Role.parse(row["role"])
        return UserRecord(**row)
