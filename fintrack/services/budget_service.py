import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fintrack.models.budget import Budget
from fintrack.models.tenant_context import TenantContext
from fintrack.repositories.budget_repository import BudgetRepository
from fintrack.repositories.category_repository import CategoryRepository
from fintrack.schemas.budget_schemas import BudgetCreate, BudgetUpdate
from fintrack.services.audit_logger import AuditLogger, snapshot
from fintrack.services.budget_aggregator import BudgetAggregator, BudgetStatus, ZERO
from fintrack.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


def previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


class BudgetService:
    """Service layer for monthly category budgets"""

    def __init__(self, db: Session, audit_logger: AuditLogger | None = None):
        self.db = db
        self.budget_repo = BudgetRepository(db)
        self.category_repo = CategoryRepository(db)
        self.aggregator = BudgetAggregator(db)
        self.audit_logger = audit_logger or AuditLogger(db)

    def create_budget(self, data: BudgetCreate, context: TenantContext) -> Budget:
        """
        Create the budget of one category for one month.

        With carry_over, rollover_in is the previous month's positive remaining.

        Raises:
            ForbiddenException: If user is not ADMIN or OWNER
            NotFoundException: If category doesn't exist in tenant
            ConflictException: If the category already has a budget that month
        """
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can manage budgets")

        tenant_id = context.tenant.id
        if not self.category_repo.get_by_id_and_tenant(data.category_id, tenant_id):
            raise NotFoundException(f"Category {data.category_id} not found")
        if data.subcategory_id is not None:
            subcategory = self.category_repo.get_subcategory(data.subcategory_id, tenant_id)
            if not subcategory or subcategory.category_id != data.category_id:
                raise ValidationException(
                    f"Subcategory {data.subcategory_id} does not belong to category {data.category_id}"
                )

        if self.budget_repo.get_for_period(tenant_id, data.category_id, data.year, data.month):
            raise ConflictException(
                f"Category {data.category_id} already has a budget for {data.year}-{data.month:02d}"
            )

        rollover_in = data.rollover_in
        if data.carry_over:
            prev_year, prev_month = previous_month(data.year, data.month)
            prev = self.aggregator.compute(tenant_id, data.category_id, prev_year, prev_month)
            rollover_in = max(prev.remaining, ZERO)

        try:
            budget = self.budget_repo.create(
                Budget(
                    tenant_id=tenant_id,
                    year=data.year,
                    month=data.month,
                    category_id=data.category_id,
                    subcategory_id=data.subcategory_id,
                    amount=data.amount,
                    rollover_in=rollover_in,
                    description=data.description,
                )
            )
        except IntegrityError:
            self.db.rollback()
            raise ConflictException(
                f"Category {data.category_id} already has a budget for {data.year}-{data.month:02d}"
            )

        self.audit_logger.log_event(
            tenant_id, "budgets", budget.id, "create", None, snapshot(budget), context.user.id
        )
        return budget

    def get_budgets(
        self, context: TenantContext, year: int | None = None, month: int | None = None
    ) -> list[Budget]:
        if year is not None and month is not None:
            return self.budget_repo.get_by_period(context.tenant.id, year, month)
        budgets = self.budget_repo.get_by_tenant(context.tenant.id)
        if year is not None:
            budgets = [budget for budget in budgets if budget.year == year]
        return budgets

    def update_budget(self, budget_id: int, data: BudgetUpdate, context: TenantContext) -> Budget:
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can manage budgets")

        budget = self._get_budget(budget_id, context)
        before = snapshot(budget)

        if data.amount is not None:
            budget.amount = data.amount
        if data.rollover_in is not None:
            budget.rollover_in = data.rollover_in
        if data.description is not None:
            budget.description = data.description

        budget = self.budget_repo.update(budget)
        self.audit_logger.log_event(
            context.tenant.id, "budgets", budget.id, "update", before, snapshot(budget), context.user.id
        )
        return budget

    def delete_budget(self, budget_id: int, context: TenantContext) -> None:
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can manage budgets")

        budget = self._get_budget(budget_id, context)
        before = snapshot(budget)
        self.budget_repo.delete(budget)
        self.audit_logger.log_event(
            context.tenant.id, "budgets", budget_id, "delete", before, None, context.user.id
        )

    def get_status(
        self, context: TenantContext, category_id: int, year: int, month: int
    ) -> BudgetStatus:
        if not self.category_repo.get_by_id_and_tenant(category_id, context.tenant.id):
            raise NotFoundException(f"Category {category_id} not found")
        return self.aggregator.compute(context.tenant.id, category_id, year, month)

    def get_period_status(self, context: TenantContext, year: int, month: int) -> list[BudgetStatus]:
        return self.aggregator.compute_period(context.tenant.id, year, month)

    def _get_budget(self, budget_id: int, context: TenantContext) -> Budget:
        budget = self.budget_repo.get_by_id_and_tenant(budget_id, context.tenant.id)
        if not budget:
            raise NotFoundException(f"Budget {budget_id} not found")
        return budget
