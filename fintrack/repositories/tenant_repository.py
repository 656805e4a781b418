"""Repository for Tenant model operations."""

from sqlalchemy.orm import Session
from fintrack.models.tenant import Tenant, TenantStatus


class TenantRepository:
    """Repository for Tenant model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tenant_id: int) -> Tenant | None:
        """
        Get tenant by ID.

        Args:
            tenant_id: Tenant ID

        Returns:
            Tenant object or None if not found
        """
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def get_owned_by_user(
        self, owner_user_id: int, statuses: list[TenantStatus] | None = None
    ) -> list[Tenant]:
        """
        Get tenants owned by a user, optionally restricted to some statuses.

        Args:
            owner_user_id: Internal user ID of the owner
            statuses: Only return tenants in one of these states

        Returns:
            List of Tenant objects ordered by ID
        """
        query = self.db.query(Tenant).filter(Tenant.owner_user_id == owner_user_id)
        if statuses:
            query = query.filter(Tenant.status.in_(statuses))
        return query.order_by(Tenant.id).all()

    def create_no_commit(self, tenant: Tenant) -> Tenant:
        """
        Add a tenant and flush to assign its ID.
        Caller responsible for commit (provisioning batches).
        """
        self.db.add(tenant)
        self.db.flush()
        return tenant

    def update(self, tenant: Tenant) -> Tenant:
        """
        Update an existing tenant.

        Args:
            tenant: Tenant object with updated fields

        Returns:
            Updated Tenant object
        """
        self.db.commit()
        self.db.refresh(tenant)
        return tenant
