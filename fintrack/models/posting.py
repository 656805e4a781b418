import datetime as dt
from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Boolean, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column
from fintrack.models.base import Base, TimestampMixin


class PostingKind(str, PyEnum):
    EXPENSE = "expense"
    INCOME = "income"


class PostingSource(str, PyEnum):
    MANUAL = "manual"
    OCR = "ocr"


class PostingStatus(str, PyEnum):
    POSTED = "posted"
    DRAFT = "draft"


class PaymentMethod(str, PyEnum):
    CASH = "cash"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    TRANSFER = "transfer"
    OTHER = "other"


class IncomeCategory(str, PyEnum):
    SALARY = "salary"
    INVESTMENTS = "investments"
    PRIZES_COMMISSIONS = "prizes_commissions"
    OTHER = "other"


def _enum(enum_cls):
    return Enum(enum_cls, native_enum=False, values_callable=lambda x: [e.value for e in x])


class PostingMixin(TimestampMixin):
    """
    Columns shared by expense and income postings.

    amount/currency is what the user entered; base_amount is the same value
    in the tenant's base currency at entry time. Installment columns are
    only set for postings that belong to an installment group (N > 1).
    Postings are soft-deleted via `deleted`, never removed.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    base_amount: Mapped[Decimal] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    entity_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("entities.id"), nullable=True
    )
    entity_tax_id: Mapped[str | None] = mapped_column(String(11), nullable=True)
    entity_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        _enum(PaymentMethod), nullable=False, default=PaymentMethod.CASH
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[PostingSource] = mapped_column(
        _enum(PostingSource), nullable=False, default=PostingSource.MANUAL
    )
    status: Mapped[PostingStatus] = mapped_column(
        _enum(PostingStatus), nullable=False, default=PostingStatus.POSTED
    )
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Installment group metadata
    installments: Mapped[int | None] = mapped_column(Integer, nullable=True)
    installment_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    card_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    fingerprint: Mapped[str | None] = mapped_column(String(128), nullable=True)


class Expense(PostingMixin, Base):
    __tablename__ = "expenses"

    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False
    )
    subcategory_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("subcategories.id"), nullable=True
    )

    # Composite indexes for budget aggregation and listing
    __table_args__ = (
        Index("ix_expenses_tenant_category_date", "tenant_id", "category_id", "date"),
        Index("ix_expenses_tenant_date", "tenant_id", "date"),
    )


class Income(PostingMixin, Base):
    __tablename__ = "incomes"

    category: Mapped[IncomeCategory] = mapped_column(
        _enum(IncomeCategory), nullable=False, default=IncomeCategory.OTHER
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_incomes_tenant_date", "tenant_id", "date"),
    )


POSTING_MODELS = {
    PostingKind.EXPENSE: Expense,
    PostingKind.INCOME: Income,
}
