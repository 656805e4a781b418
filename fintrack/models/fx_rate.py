import datetime as dt
from decimal import Decimal
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Index
from sqlalchemy.orm import Mapped, mapped_column
from fintrack.models.base import Base, TimestampMixin


class FxRate(Base, TimestampMixin):
    """
    Tenant-maintained exchange rate.

    rate is the number of base-currency units for one unit of `code`
    (e.g. 1000 ARS per USD). These take precedence over the external provider.
    """

    __tablename__ = "fx_rates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(3), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(precision=18, scale=6), nullable=False)

    __table_args__ = (
        Index("ix_fx_rates_tenant_code_date", "tenant_id", "code", "date"),
    )
