from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from fintrack.models.posting import Expense, Income, PostingKind, POSTING_MODELS
from fintrack.models.tenant_context import TenantContext
from fintrack.repositories.posting_repository import PostingRepository
from fintrack.repositories.category_repository import CategoryRepository
from fintrack.schemas.posting_schemas import ExpenseUpdate
from fintrack.services.audit_logger import AuditLogger, snapshot
from fintrack.core.exceptions import NotFoundException, ValidationException


class PostingService:
    """Read, edit and soft-delete postings of one kind (expenses or incomes)"""

    def __init__(
        self,
        db: Session,
        kind: PostingKind = PostingKind.EXPENSE,
        audit_logger: AuditLogger | None = None,
    ):
        self.db = db
        self.kind = kind
        self.model = POSTING_MODELS[kind]
        self.posting_repo = PostingRepository(db, self.model)
        self.category_repo = CategoryRepository(db)
        self.audit_logger = audit_logger or AuditLogger(db)

    def get_posting(self, posting_id: int, context: TenantContext) -> Expense | Income:
        """
        Get posting by ID within the tenant.

        Raises:
            NotFoundException: If posting doesn't exist or belongs to another tenant
        """
        posting = self.posting_repo.get_by_id_and_tenant(posting_id, context.tenant.id)
        if not posting:
            raise NotFoundException(f"{self.kind.value.capitalize()} {posting_id} not found")
        return posting

    def get_postings(
        self,
        context: TenantContext,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        entity_id: Optional[int] = None,
        include_deleted: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Expense | Income], int]:
        """
        Get postings with filters.

        Returns:
            Tuple of (postings, total_count)
        """
        return self.posting_repo.get_with_filters(
            tenant_id=context.tenant.id,
            start_date=start_date,
            end_date=end_date,
            category_id=category_id,
            entity_id=entity_id,
            include_deleted=include_deleted,
            limit=limit,
            offset=offset,
        )

    def update_expense(
        self, posting_id: int, data: ExpenseUpdate, context: TenantContext
    ) -> Expense:
        """
        Re-categorize or annotate an expense. Amounts, currency and dates are fixed once posted.

        Raises:
            NotFoundException: If expense or category doesn't exist in tenant
            ValidationException: If subcategory doesn't belong to the category
        """
        expense = self.get_posting(posting_id, context)
        if expense.deleted:
            raise ValidationException(f"Expense {posting_id} is deleted")

        before = snapshot(expense)

        category_id = data.category_id if data.category_id is not None else expense.category_id
        if data.category_id is not None:
            if not self.category_repo.get_by_id_and_tenant(category_id, context.tenant.id):
                raise NotFoundException(f"Category {category_id} not found")
            expense.category_id = category_id
            if data.subcategory_id is None:
                expense.subcategory_id = None

        if data.subcategory_id is not None:
            subcategory = self.category_repo.get_subcategory(data.subcategory_id, context.tenant.id)
            if not subcategory or subcategory.category_id != category_id:
                raise ValidationException(
                    f"Subcategory {data.subcategory_id} does not belong to category {category_id}"
                )
            expense.subcategory_id = data.subcategory_id

        if data.payment_method is not None:
            expense.payment_method = data.payment_method
        if data.notes is not None:
            expense.notes = data.notes

        expense = self.posting_repo.update(expense)
        self.audit_logger.log_event(
            context.tenant.id,
            self.model.__tablename__,
            expense.id,
            "update",
            before,
            snapshot(expense),
            context.user.id,
        )
        return expense

    def delete_posting(self, posting_id: int, context: TenantContext) -> None:
        """
        Soft-delete a posting; it stays stored but leaves listings and budget totals.

        Raises:
            NotFoundException: If posting doesn't exist or is already deleted
        """
        posting = self.get_posting(posting_id, context)
        if posting.deleted:
            raise NotFoundException(f"{self.kind.value.capitalize()} {posting_id} not found")

        before = snapshot(posting)
        posting.deleted = True
        posting = self.posting_repo.update(posting)
        self.audit_logger.log_event(
            context.tenant.id,
            self.model.__tablename__,
            posting.id,
            "soft-delete",
            before,
            snapshot(posting),
            context.user.id,
        )
