"""Repository for TenantMembership model operations."""

from sqlalchemy.orm import Session
from fintrack.models.tenant_membership import TenantMembership
from fintrack.models.role import TenantRole, MembershipStatus


class TenantMembershipRepository:
    """Repository for TenantMembership model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_membership(self, user_id: int, tenant_id: int) -> TenantMembership | None:
        """
        Get membership for a specific user in a specific tenant.

        Args:
            user_id: User ID
            tenant_id: Tenant ID

        Returns:
            TenantMembership object or None if not found
        """
        return (
            self.db.query(TenantMembership)
            .filter(
                TenantMembership.user_id == user_id,
                TenantMembership.tenant_id == tenant_id,
            )
            .first()
        )

    def get_tenant_members(self, tenant_id: int) -> list[TenantMembership]:
        """
        Get all memberships for a tenant.

        Args:
            tenant_id: Tenant ID

        Returns:
            List of TenantMembership objects for the tenant
        """
        return (
            self.db.query(TenantMembership)
            .filter(TenantMembership.tenant_id == tenant_id)
            .order_by(TenantMembership.id)
            .all()
        )

    def get_user_memberships(self, user_id: int) -> list[TenantMembership]:
        """
        Get all non-revoked memberships for a user (all tenants they belong to).

        Args:
            user_id: User ID

        Returns:
            List of TenantMembership objects for the user
        """
        return (
            self.db.query(TenantMembership)
            .filter(
                TenantMembership.user_id == user_id,
                TenantMembership.status != MembershipStatus.REVOKED,
            )
            .order_by(TenantMembership.tenant_id)
            .all()
        )

    def count_seats(self, tenant_id: int) -> int:
        """
        Count memberships that occupy a license seat (active or invited).

        Args:
            tenant_id: Tenant ID

        Returns:
            Number of non-revoked memberships
        """
        return (
            self.db.query(TenantMembership)
            .filter(
                TenantMembership.tenant_id == tenant_id,
                TenantMembership.status != MembershipStatus.REVOKED,
            )
            .count()
        )

    def create_no_commit(self, membership: TenantMembership) -> TenantMembership:
        """Add membership without committing (for atomic ops)"""
        self.db.add(membership)
        self.db.flush()
        return membership

    def create(self, membership: TenantMembership) -> TenantMembership:
        """
        Create a new tenant membership.

        Args:
            membership: TenantMembership object to create

        Returns:
            Created TenantMembership object with ID populated

        Raises:
            IntegrityError: If (tenant_id, user_id) already exists
        """
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def update(self, membership: TenantMembership) -> TenantMembership:
        """
        Update a tenant membership.

        Args:
            membership: TenantMembership object to update

        Returns:
            Updated TenantMembership object
        """
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def get_owner(self, tenant_id: int) -> TenantMembership | None:
        """
        Get the owner membership for a tenant.

        Args:
            tenant_id: Tenant ID

        Returns:
            TenantMembership with OWNER role or None
        """
        return (
            self.db.query(TenantMembership)
            .filter(
                TenantMembership.tenant_id == tenant_id,
                TenantMembership.role == TenantRole.OWNER,
            )
            .first()
        )
