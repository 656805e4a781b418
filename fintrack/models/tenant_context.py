"""Tenant context for request authorization."""

from dataclasses import dataclass
from fintrack.models.user import User
from fintrack.models.tenant import Tenant
from fintrack.models.role import TenantRole


@dataclass
class TenantContext:
    """
    Complete tenant context for request authorization.

    Contains user, tenant, and role information extracted from JWT
    and verified against database. Used throughout the application
    for permission checks and tenant isolation.

    Attributes:
        user: The authenticated User object
        tenant: The Tenant the user is accessing
        role: The user's role within this tenant
    """

    user: User
    tenant: Tenant
    role: TenantRole

    def has_permission(self, required_role: TenantRole) -> bool:
        """
        Check if user's role meets or exceeds required role.

        Role hierarchy: OWNER (3) > ADMIN (2) > MEMBER (1)
        """
        role_hierarchy = {
            TenantRole.OWNER: 3,
            TenantRole.ADMIN: 2,
            TenantRole.MEMBER: 1,
        }
        return role_hierarchy[self.role] >= role_hierarchy[required_role]

    def is_owner(self) -> bool:
        """Check if user is the tenant owner."""
        return self.role == TenantRole.OWNER

    def is_admin_or_higher(self) -> bool:
        """Check if user is admin or owner."""
        return self.role in (TenantRole.OWNER, TenantRole.ADMIN)

    def can_write(self) -> bool:
        """Every active member may record postings."""
        return True

    def __repr__(self) -> str:
        return f"<TenantContext(user_id={self.user.id}, tenant_id={self.tenant.id}, role={self.role.value})>"
