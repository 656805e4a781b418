from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from fintrack.models.base import Base, TimestampMixin


class ReceiptFingerprint(Base, TimestampMixin):
    """Dedup key so the same external receipt is never recorded twice."""

    __tablename__ = "receipt_fingerprints"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )
    fingerprint: Mapped[str] = mapped_column(String(128), nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "fingerprint", name="uq_receipt_fingerprint"),
    )
