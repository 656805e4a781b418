from sqlalchemy import String, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from fintrack.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from fintrack.models.tenant_membership import TenantMembership


class User(Base, TimestampMixin):
    """
    Tracks users from the auth service.

    Only stores user_id (sub from JWT) and profile fields - no auth credentials.
    Auto-created on first API request with valid JWT.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    auth_user_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    # auth_user_id is the 'sub' claim from JWT
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tenant_ids: Mapped[list[int] | None] = mapped_column(JSON, nullable=True, default=list)

    # Relationships
    memberships: Mapped[list["TenantMembership"]] = relationship(
        "TenantMembership",
        back_populates="user",
        cascade="all, delete-orphan",
    )
