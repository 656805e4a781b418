from datetime import date
from decimal import Decimal
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from fintrack.models.posting import Expense, Income
from fintrack.models.receipt_fingerprint import ReceiptFingerprint

Posting = Expense | Income


class PostingRepository:
    """
    Repository for expense/income postings.

    One instance serves a single posting table, chosen by `model`.
    """

    def __init__(self, db: Session, model: type[Expense] | type[Income] = Expense):
        self.db = db
        self.model = model

    def create_bulk(self, postings: list[Posting]) -> list[Posting]:
        """
        Create multiple postings without committing.
        Caller responsible for commit. Enables atomic batch operations.
        """
        self.db.add_all(postings)
        self.db.flush()  # Assign IDs without committing
        return postings

    def get_by_id_and_tenant(self, posting_id: int, tenant_id: int) -> Optional[Posting]:
        """
        Get posting by ID, ensuring it belongs to the tenant.

        Returns:
            Posting or None if not found or belongs to different tenant
        """
        return (
            self.db.query(self.model)
            .filter(self.model.id == posting_id, self.model.tenant_id == tenant_id)
            .first()
        )

    def get_with_filters(
        self,
        tenant_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        entity_id: Optional[int] = None,
        include_deleted: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Posting], int]:
        """
        Get postings with filters, ensuring multi-tenant isolation.

        Args:
            tenant_id: Tenant ID for isolation
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            category_id: Optional category filter (expenses only)
            entity_id: Optional counterparty filter
            include_deleted: Include soft-deleted postings
            limit: Maximum number of results
            offset: Pagination offset

        Returns:
            Tuple of (postings list, total count)
        """
        query = self.db.query(self.model).filter(self.model.tenant_id == tenant_id)

        if not include_deleted:
            query = query.filter(self.model.deleted.is_(False))

        if start_date is not None:
            query = query.filter(self.model.date >= start_date)

        if end_date is not None:
            query = query.filter(self.model.date <= end_date)

        if category_id is not None and self.model is Expense:
            query = query.filter(Expense.category_id == category_id)

        if entity_id is not None:
            query = query.filter(self.model.entity_id == entity_id)

        # Get total count before pagination
        total = query.count()

        postings = (
            query.order_by(self.model.date.desc(), self.model.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

        return postings, total

    def sum_base_amount(
        self, tenant_id: int, category_id: int, start_date: date, end_date: date
    ) -> Decimal:
        """Sum base-currency amounts of non-deleted expenses of a category in [start, end]"""
        result = (
            self.db.query(func.sum(Expense.base_amount))
            .filter(
                Expense.tenant_id == tenant_id,
                Expense.category_id == category_id,
                Expense.deleted.is_(False),
                Expense.date >= start_date,
                Expense.date <= end_date,
            )
            .scalar()
        )
        return Decimal(str(result)).quantize(Decimal("0.01")) if result is not None else Decimal("0.00")

    def update(self, posting: Posting) -> Posting:
        """Update a posting"""
        self.db.commit()
        self.db.refresh(posting)
        return posting

    def fingerprint_exists(self, tenant_id: int, fingerprint: str) -> bool:
        return (
            self.db.query(ReceiptFingerprint)
            .filter(
                ReceiptFingerprint.tenant_id == tenant_id,
                ReceiptFingerprint.fingerprint == fingerprint,
            )
            .first()
            is not None
        )

    def add_fingerprint_no_commit(self, tenant_id: int, fingerprint: str) -> ReceiptFingerprint:
        record = ReceiptFingerprint(tenant_id=tenant_id, fingerprint=fingerprint)
        self.db.add(record)
        self.db.flush()
        return record
