from sqlalchemy.orm import Session
from fintrack.models.budget import Budget


class BudgetRepository:
    """Repository for Budget data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_for_period(
        self, tenant_id: int, category_id: int, year: int, month: int
    ) -> Budget | None:
        """Get the budget for (tenant, category, year, month); unique by constraint"""
        return (
            self.db.query(Budget)
            .filter(
                Budget.tenant_id == tenant_id,
                Budget.category_id == category_id,
                Budget.year == year,
                Budget.month == month,
            )
            .first()
        )

    def get_by_period(self, tenant_id: int, year: int, month: int) -> list[Budget]:
        """Get every budget of a tenant in a month"""
        return (
            self.db.query(Budget)
            .filter(Budget.tenant_id == tenant_id, Budget.year == year, Budget.month == month)
            .order_by(Budget.category_id)
            .all()
        )

    def get_by_tenant(self, tenant_id: int) -> list[Budget]:
        return (
            self.db.query(Budget)
            .filter(Budget.tenant_id == tenant_id)
            .order_by(Budget.year.desc(), Budget.month.desc(), Budget.category_id)
            .all()
        )

    def get_by_id_and_tenant(self, budget_id: int, tenant_id: int) -> Budget | None:
        return (
            self.db.query(Budget)
            .filter(Budget.id == budget_id, Budget.tenant_id == tenant_id)
            .first()
        )

    def create(self, budget: Budget) -> Budget:
        """
        Create a new budget.

        Raises:
            IntegrityError: If (tenant_id, year, month, category_id) already exists
        """
        self.db.add(budget)
        self.db.commit()
        self.db.refresh(budget)
        return budget

    def update(self, budget: Budget) -> Budget:
        self.db.commit()
        self.db.refresh(budget)
        return budget

    def delete(self, budget: Budget) -> None:
        self.db.delete(budget)
        self.db.commit()
