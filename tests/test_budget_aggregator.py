import pytest
from datetime import date
from decimal import Decimal

from fintrack.core.exceptions import ValidationException
from fintrack.models import Budget, Expense
from fintrack.repositories.category_repository import CategoryRepository
from fintrack.services.budget_aggregator import BudgetAggregator, month_bounds


def add_expense(db_session, tenant, user, category, base_amount, day, deleted=False):
    db_session.add(
        Expense(
            tenant_id=tenant.id,
            user_id=user.id,
            category_id=category.id,
            date=day,
            amount=Decimal(base_amount),
            currency="ARS",
            base_amount=Decimal(base_amount),
            deleted=deleted,
        )
    )
    db_session.commit()


@pytest.fixture
def january_budget(db_session, shared_tenant, food_category):
    budget = Budget(
        tenant_id=shared_tenant.id,
        year=2024,
        month=1,
        category_id=food_category.id,
        amount=Decimal("60000"),
        rollover_in=Decimal("0"),
    )
    db_session.add(budget)
    db_session.commit()
    return budget


def test_spent_remaining_percentage(db_session, shared_tenant, test_user, food_category, january_budget):
    """60000 allocated, 48900 spent -> 11100 remaining, 81.5%"""
    add_expense(db_session, shared_tenant, test_user, food_category, "40000", date(2024, 1, 1))
    add_expense(db_session, shared_tenant, test_user, food_category, "8900", date(2024, 1, 31))

    status = BudgetAggregator(db_session).compute(shared_tenant.id, food_category.id, 2024, 1)

    assert status.allocated == Decimal("60000")
    assert status.spent == Decimal("48900.00")
    assert status.remaining == Decimal("11100.00")
    assert status.percentage == Decimal("81.50")
    assert status.display_percentage == Decimal("81.50")


def test_excludes_deleted_other_months_and_categories(
    db_session, shared_tenant, test_user, food_category, january_budget
):
    other_category = CategoryRepository(db_session).get_by_tenant(shared_tenant.id)[1]
    add_expense(db_session, shared_tenant, test_user, food_category, "1000", date(2024, 1, 10))
    add_expense(db_session, shared_tenant, test_user, food_category, "5000", date(2024, 1, 11), deleted=True)
    add_expense(db_session, shared_tenant, test_user, food_category, "7000", date(2024, 2, 1))
    add_expense(db_session, shared_tenant, test_user, food_category, "7000", date(2023, 12, 31))
    add_expense(db_session, shared_tenant, test_user, other_category, "9000", date(2024, 1, 10))

    status = BudgetAggregator(db_session).compute(shared_tenant.id, food_category.id, 2024, 1)

    assert status.spent == Decimal("1000.00")


def test_overspent_caps_display_percentage(db_session, shared_tenant, test_user, food_category, january_budget):
    add_expense(db_session, shared_tenant, test_user, food_category, "90000", date(2024, 1, 5))

    status = BudgetAggregator(db_session).compute(shared_tenant.id, food_category.id, 2024, 1)

    assert status.remaining == Decimal("-30000.00")
    assert status.percentage == Decimal("150.00")
    assert status.display_percentage == Decimal("100")


def test_rollover_adds_to_remaining(db_session, shared_tenant, test_user, food_category, january_budget):
    january_budget.rollover_in = Decimal("5000")
    db_session.commit()
    add_expense(db_session, shared_tenant, test_user, food_category, "10000", date(2024, 1, 5))

    status = BudgetAggregator(db_session).compute(shared_tenant.id, food_category.id, 2024, 1)

    assert status.remaining == Decimal("55000.00")
    # Percentage is measured against the allocation only
    assert status.percentage == Decimal("16.67")


def test_missing_budget_reports_spending(db_session, shared_tenant, test_user, food_category):
    add_expense(db_session, shared_tenant, test_user, food_category, "2500", date(2024, 3, 3))

    status = BudgetAggregator(db_session).compute(shared_tenant.id, food_category.id, 2024, 3)

    assert status.allocated == Decimal("0.00")
    assert status.spent == Decimal("2500.00")
    assert status.remaining == Decimal("-2500.00")
    assert status.percentage == Decimal("0.00")


def test_compute_period_lists_budgets(db_session, shared_tenant, food_category, january_budget):
    statuses = BudgetAggregator(db_session).compute_period(shared_tenant.id, 2024, 1)

    assert [s.category_id for s in statuses] == [food_category.id]
    assert BudgetAggregator(db_session).compute_period(shared_tenant.id, 2024, 2) == []


def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31))
    with pytest.raises(ValidationException):
        month_bounds(2024, 13)
