"""Tenant model for multi-tenant isolation."""

from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Enum, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from fintrack.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from fintrack.models.tenant_membership import TenantMembership
    from fintrack.models.license import License


class TenantType(str, PyEnum):
    PERSONAL = "personal"
    FAMILY = "family"
    COMPANY = "company"


class TenantStatus(str, PyEnum):
    """
    Provisioning state machine.

    PENDING               - phase 1 committed (tenant + owner membership)
    PARTIALLY_PROVISIONED - phase 2 failed; resumable via complete_provisioning
    ACTIVE                - license and categories exist
    EXPIRED               - license lapsed
    """

    PENDING = "pending"
    PARTIALLY_PROVISIONED = "partially_provisioned"
    ACTIVE = "active"
    EXPIRED = "expired"


ALLOWED_TRANSITIONS: dict[TenantStatus, set[TenantStatus]] = {
    TenantStatus.PENDING: {TenantStatus.ACTIVE, TenantStatus.PARTIALLY_PROVISIONED},
    TenantStatus.PARTIALLY_PROVISIONED: {TenantStatus.ACTIVE},
    TenantStatus.ACTIVE: {TenantStatus.EXPIRED},
    TenantStatus.EXPIRED: {TenantStatus.ACTIVE},
}


class Tenant(Base, TimestampMixin):
    """
    Multi-tenant isolation boundary.

    A tenant is a billing and data scope: a person, a household or a
    company. Categories, entities, postings, budgets and FX rates all
    belong to a tenant; users reach them through memberships.

    A tenant only becomes ACTIVE once its license and owner membership
    exist (see TenantProvisioner).
    """

    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[TenantType] = mapped_column(
        Enum(TenantType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TenantType.PERSONAL,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    base_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="ARS")
    owner_user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[TenantStatus] = mapped_column(
        Enum(TenantStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TenantStatus.PENDING,
        index=True,
    )
    settings: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=dict)

    # Relationships
    memberships: Mapped[list["TenantMembership"]] = relationship(
        "TenantMembership",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )
    licenses: Mapped[list["License"]] = relationship(
        "License",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )

    def can_transition_to(self, new_status: TenantStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status: TenantStatus) -> None:
        """Move to new_status, rejecting transitions outside the state machine."""
        if not self.can_transition_to(new_status):
            raise ValueError(
                f"Tenant {self.id} cannot move from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}', status={self.status.value})>"
