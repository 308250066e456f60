"""Tenant Access Resolver.

Decides ALLOW / NOT_FOUND / FORBIDDEN for a principal against any entity
in the Company → PurchaseOrder → Shipment → Container → Bale hierarchy:

1. Load the entity's ownership chain (one loader call)
2. Missing entity → NOT_FOUND
3. Entity in another company → NOT_FOUND (same shape as missing)
4. ASSIGNED_ONLY roles without a PO assignment → FORBIDDEN
5. Otherwise ALLOW with the chain

The company check always runs, and must pass, before the assignment
lookup. A loader failure becomes LOOKUP_ERROR and is never reported as
NOT_FOUND.
"""

from typing import Callable, Dict, Optional

from access.errors import OwnershipLookupError
from access.loader import OwnershipLoader
from access.models import (
    AccessOutcome,
    AccessResolution,
    EntityType,
    OwnershipChain,
    Principal,
    ViewScope,
)
from access.policy import get_capabilities
from core.observability.logging import get_logger


logger = get_logger(__name__)


class TenantAccessResolver:
    """Resolves a principal's access to an entity.

    Stateless apart from the loader it reads through; safe to share across
    threads and requests.

    Example:
        resolver = TenantAccessResolver(SQLiteOwnershipLoader(db_path))

        resolution = resolver.resolve_access(principal, EntityType.BALE, bale_id)
        if resolution.allowed:
            po_id = resolution.chain.po_id
    """

    def __init__(self, loader: OwnershipLoader):
        self.loader = loader
        self._ownership_loaders: Dict[EntityType, Callable[[str], Optional[OwnershipChain]]] = {
            EntityType.PURCHASE_ORDER: loader.load_po_ownership,
            EntityType.SHIPMENT: loader.load_shipment_ownership,
            EntityType.CONTAINER: loader.load_container_ownership,
            EntityType.BALE: loader.load_bale_ownership,
        }

    def resolve_access(
        self,
        principal: Principal,
        entity_type: EntityType,
        entity_id: str,
    ) -> AccessResolution:
        """Resolve access to a single entity.

        Args:
            principal: Verified caller
            entity_type: Type of the target entity
            entity_id: ID of the target entity

        Returns:
            AccessResolution with the decision (and the chain on ALLOW)
        """
        entity_type = EntityType(entity_type)
        if entity_type == EntityType.USER:
            return self.resolve_user_access(principal, entity_id)

        def result(outcome: AccessOutcome, **kwargs) -> AccessResolution:
            return AccessResolution(
                outcome=outcome,
                entity_type=entity_type,
                entity_id=entity_id,
                **kwargs,
            )

        try:
            chain = self._ownership_loaders[entity_type](entity_id)
        except OwnershipLookupError as e:
            logger.error(
                f"Ownership lookup failed for {entity_type.value} {entity_id}",
                extra_fields={"operation": e.operation},
            )
            return result(AccessOutcome.LOOKUP_ERROR, error=e)

        # Cross-tenant and missing are reported identically
        if chain is None or chain.company_id != principal.company_id:
            self._log_denied(principal, entity_type, entity_id, AccessOutcome.NOT_FOUND)
            return result(AccessOutcome.NOT_FOUND)

        if get_capabilities(principal.role).view_scope == ViewScope.ASSIGNED_ONLY:
            try:
                assigned = self.loader.load_assignment(chain.po_id, principal.user_id)
            except OwnershipLookupError as e:
                logger.error(
                    f"Assignment lookup failed for PO {chain.po_id}",
                    extra_fields={"operation": e.operation},
                )
                return result(AccessOutcome.LOOKUP_ERROR, error=e)

            if not assigned:
                self._log_denied(principal, entity_type, entity_id, AccessOutcome.FORBIDDEN)
                return result(AccessOutcome.FORBIDDEN)

        return result(AccessOutcome.ALLOW, chain=chain)

    def resolve_user_access(self, principal: Principal, user_id: str) -> AccessResolution:
        """Same-company rule for operations that target a user.

        ALLOW if the user belongs to the principal's company, else NOT_FOUND.
        Assignments do not apply to users.
        """
        try:
            company_id = self.loader.load_user_company(user_id)
        except OwnershipLookupError as e:
            logger.error(
                f"User lookup failed for {user_id}",
                extra_fields={"operation": e.operation},
            )
            return AccessResolution(
                outcome=AccessOutcome.LOOKUP_ERROR,
                entity_type=EntityType.USER,
                entity_id=user_id,
                error=e,
            )

        if company_id is None or company_id != principal.company_id:
            self._log_denied(principal, EntityType.USER, user_id, AccessOutcome.NOT_FOUND)
            outcome = AccessOutcome.NOT_FOUND
        else:
            outcome = AccessOutcome.ALLOW

        return AccessResolution(outcome=outcome, entity_type=EntityType.USER, entity_id=user_id)

    def require_access(
        self,
        principal: Principal,
        entity_type: EntityType,
        entity_id: str,
    ) -> Optional[OwnershipChain]:
        """Resolve access and raise on anything but ALLOW.

        Returns:
            The ownership chain (None for users)

        Raises:
            NotFoundError: Entity missing or in another company
            ForbiddenError: Missing PO assignment
            OwnershipLookupError: The store failed to answer
        """
        return self.resolve_access(principal, entity_type, entity_id).raise_for_outcome()

    def _log_denied(
        self,
        principal: Principal,
        entity_type: EntityType,
        entity_id: str,
        outcome: AccessOutcome,
    ) -> None:
        logger.info(
            f"Access denied to {entity_type.value} {entity_id}",
            extra_fields={
                "outcome": outcome.value,
                "user_id": principal.user_id,
                "role": principal.role.value,
            },
        )
