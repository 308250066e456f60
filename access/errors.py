"""Access control errors."""

from typing import Iterable, Optional


class AccessError(Exception):
    """Base error for access decisions."""

    def __init__(self, message: str, entity_type: Optional[str] = None,
                 entity_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity_type = entity_type
        self.entity_id = entity_id


class NotFoundError(AccessError):
    """Entity is absent or belongs to another tenant.

    The message is the same in both cases.
    """

    def __init__(self, entity_type: str, entity_id: str):
        label = entity_type.replace("_", " ").capitalize()
        super().__init__(f"{label} not found", entity_type, entity_id)


class ForbiddenError(AccessError):
    """Caller is in the right tenant but may not do this."""

    def __init__(self, entity_type: Optional[str] = None, entity_id: Optional[str] = None,
                 message: Optional[str] = None):
        if message is None:
            label = (entity_type or "resource").replace("_", " ")
            message = f"You do not have access to this {label}"
        super().__init__(message, entity_type, entity_id)


class RoleNotAllowedError(ForbiddenError):
    """The caller's role is not permitted to perform an operation."""

    def __init__(self, role: str, allowed: Iterable[str]):
        allowed = list(allowed)
        super().__init__(message=f"Access denied. Required roles: {', '.join(allowed)}")
        self.role = role
        self.allowed = allowed


class OwnershipLookupError(Exception):
    """The ownership store failed to answer.

    Not evidence of absence: callers must never treat it as not found.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        message = f"Ownership lookup failed: {operation}"
        if cause is not None:
            message += f" ({cause})"
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class UnknownRoleError(ValueError):
    """Role string outside the closed role set."""

    def __init__(self, role: str):
        super().__init__(f"Unknown role: {role!r}")
        self.role = role
