from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Boolean, ForeignKey, Enum, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from fintrack.models.base import Base, TimestampMixin


class EntityType(str, PyEnum):
    """Counterparty kind"""

    MERCHANT = "merchant"
    BANK = "bank"
    SERVICE = "service"
    OTHER = "other"


class Entity(Base, TimestampMixin):
    """
    Counterparty (merchant, payer) of a posting.

    Within a tenant a non-empty tax_id identifies at most one entity.
    Name is only a fallback lookup key and may repeat.
    """

    __tablename__ = "entities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tax_id: Mapped[str | None] = mapped_column(String(11), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[EntityType] = mapped_column(
        Enum(EntityType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=EntityType.MERCHANT,
    )
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    pending_tax_id: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # NULL tax ids are distinct, so only non-empty tax ids are unique
    __table_args__ = (
        UniqueConstraint("tenant_id", "tax_id", name="uq_entity_tenant_tax_id"),
        Index("ix_entities_tenant_name", "tenant_id", "name"),
    )

    def __repr__(self) -> str:
        return f"<Entity(id={self.id}, tenant_id={self.tenant_id}, name='{self.name}')>"
