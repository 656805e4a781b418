"""Tenant membership model linking users to tenants with roles."""

from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from fintrack.models.base import Base, TimestampMixin, utcnow
from fintrack.models.role import TenantRole, MembershipStatus

if TYPE_CHECKING:
    from fintrack.models.user import User
    from fintrack.models.tenant import Tenant


class TenantMembership(Base, TimestampMixin):
    """
    Join table linking users to tenants with roles.

    Display name and email are denormalized from the user so member
    lists render without joining users.

    Constraints:
    - Unique(tenant_id, user_id) - one membership per user per tenant
    - Exactly one OWNER per tenant, created by TenantProvisioner
      (enforced at application layer)
    """

    __tablename__ = "tenant_memberships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[TenantRole] = mapped_column(
        Enum(TenantRole, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TenantRole.MEMBER,
    )
    status: Mapped[MembershipStatus] = mapped_column(
        Enum(MembershipStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=MembershipStatus.ACTIVE,
    )
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="memberships")
    user: Mapped["User"] = relationship("User", back_populates="memberships")

    # Constraints
    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", name="uq_tenant_user"),
    )

    def __repr__(self) -> str:
        return f"<TenantMembership(tenant_id={self.tenant_id}, user_id={self.user_id}, role={self.role.value})>"
