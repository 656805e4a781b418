import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.orm import Session

from fintrack.core.exceptions import ValidationException
from fintrack.models.budget import Budget
from fintrack.repositories.budget_repository import BudgetRepository
from fintrack.repositories.posting_repository import PostingRepository

ZERO = Decimal("0.00")
DISPLAY_CAP = Decimal("100")


@dataclass(frozen=True)
class BudgetStatus:
    category_id: int
    year: int
    month: int
    allocated: Decimal
    rollover_in: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: Decimal
    display_percentage: Decimal


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    if not 1 <= month <= 12:
        raise ValidationException("Month must be between 1 and 12")
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


class BudgetAggregator:
    """Read-only spent/remaining computation for budgets. No side effects."""

    def __init__(self, db: Session):
        self.db = db
        self.budget_repo = BudgetRepository(db)
        self.posting_repo = PostingRepository(db)

    def compute(self, tenant_id: int, category_id: int, year: int, month: int) -> BudgetStatus:
        """
        Compute the budget status of one category for one month.

        A missing budget counts as allocated=0 and rollover_in=0; spending is
        still reported.
        """
        budget = self.budget_repo.get_for_period(tenant_id, category_id, year, month)
        return self._status(tenant_id, category_id, year, month, budget)

    def compute_period(self, tenant_id: int, year: int, month: int) -> list[BudgetStatus]:
        """Status of every budget the tenant has in the month."""
        return [
            self._status(tenant_id, budget.category_id, year, month, budget)
            for budget in self.budget_repo.get_by_period(tenant_id, year, month)
        ]

    def _status(
        self, tenant_id: int, category_id: int, year: int, month: int, budget: Budget | None
    ) -> BudgetStatus:
        start, end = month_bounds(year, month)
        allocated = Decimal(budget.amount) if budget else ZERO
        rollover_in = Decimal(budget.rollover_in or 0) if budget else ZERO
        spent = self.posting_repo.sum_base_amount(tenant_id, category_id, start, end)

        remaining = allocated + rollover_in - spent
        if allocated > 0:
            percentage = (spent / allocated * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        else:
            percentage = ZERO

        return BudgetStatus(
            category_id=category_id,
            year=year,
            month=month,
            allocated=allocated,
            rollover_in=rollover_in,
            spent=spent,
            remaining=remaining,
            percentage=percentage,
            display_percentage=min(percentage, DISPLAY_CAP),
        )
