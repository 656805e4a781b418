"""Billing license attached to a tenant."""

from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from fintrack.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from fintrack.models.tenant import Tenant


class LicensePlan(str, PyEnum):
    DEMO = "demo"
    PERSONAL = "personal"
    FAMILIAR = "familiar"
    EMPRESA = "empresa"


class LicenseStatus(str, PyEnum):
    ACTIVE = "active"
    EXPIRED = "expired"


# Seats per plan
PLAN_MAX_USERS: dict[LicensePlan, int] = {
    LicensePlan.DEMO: 1,
    LicensePlan.PERSONAL: 1,
    LicensePlan.FAMILIAR: 4,
    LicensePlan.EMPRESA: 10,
}


class License(Base, TimestampMixin):
    """
    Plan, validity window and seat limit of a tenant.

    max_users is checked when members are invited; existing members are
    never removed retroactively.
    """

    __tablename__ = "licenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan: Mapped[LicensePlan] = mapped_column(
        Enum(LicensePlan, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    status: Mapped[LicenseStatus] = mapped_column(
        Enum(LicenseStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=LicenseStatus.ACTIVE,
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    max_users: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="licenses")

    def __repr__(self) -> str:
        return f"<License(tenant_id={self.tenant_id}, plan={self.plan.value}, max_users={self.max_users})>"
