from sqlalchemy import func
from sqlalchemy.orm import Session
from fintrack.models.budget import Budget
from fintrack.models.category import Category, Subcategory
from fintrack.models.posting import Expense


class CategoryRepository:
    """Repository for Category and Subcategory data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_tenant(self, tenant_id: int) -> list[Category]:
        """Get all categories for a tenant in display order"""
        return (
            self.db.query(Category)
            .filter(Category.tenant_id == tenant_id)
            .order_by(Category.order, Category.id)
            .all()
        )

    def get_by_id_and_tenant(self, category_id: int, tenant_id: int) -> Category | None:
        """
        Get category ensuring it belongs to tenant (multi-tenant safety).

        Returns None if category doesn't exist or belongs to another tenant.
        """
        return (
            self.db.query(Category)
            .filter(Category.id == category_id, Category.tenant_id == tenant_id)
            .first()
        )

    def get_subcategory(self, subcategory_id: int, tenant_id: int) -> Subcategory | None:
        """Get subcategory ensuring it belongs to tenant"""
        return (
            self.db.query(Subcategory)
            .filter(Subcategory.id == subcategory_id, Subcategory.tenant_id == tenant_id)
            .first()
        )

    def count_subcategories(self, category_id: int) -> int:
        """Count subcategories referencing a category"""
        return (
            self.db.query(Subcategory)
            .filter(Subcategory.category_id == category_id)
            .count()
        )

    def count_references(
        self, tenant_id: int, category_id: int | None = None, subcategory_id: int | None = None
    ) -> int:
        """
        Count expenses (soft-deleted included) and budgets pointing at a
        category or subcategory.
        """
        total = 0
        for model in (Expense, Budget):
            query = self.db.query(model).filter(model.tenant_id == tenant_id)
            if category_id is not None:
                query = query.filter(model.category_id == category_id)
            if subcategory_id is not None:
                query = query.filter(model.subcategory_id == subcategory_id)
            total += query.count()
        return total

    def count_by_tenant(self, tenant_id: int) -> tuple[int, int]:
        """Return (categories, subcategories) counts for a tenant"""
        categories = self.db.query(Category).filter(Category.tenant_id == tenant_id).count()
        subcategories = (
            self.db.query(Subcategory).filter(Subcategory.tenant_id == tenant_id).count()
        )
        return categories, subcategories

    def next_category_order(self, tenant_id: int) -> int:
        result = (
            self.db.query(func.max(Category.order))
            .filter(Category.tenant_id == tenant_id)
            .scalar()
        )
        return 0 if result is None else result + 1

    def next_subcategory_order(self, category_id: int) -> int:
        result = (
            self.db.query(func.max(Subcategory.order))
            .filter(Subcategory.category_id == category_id)
            .scalar()
        )
        return 0 if result is None else result + 1

    def create_bulk(self, records: list[Category | Subcategory]) -> list[Category | Subcategory]:
        """
        Add categories/subcategories without committing.
        Caller responsible for commit. Enables atomic batch operations.
        """
        self.db.add_all(records)
        self.db.flush()  # Assign IDs without committing
        return records

    def create(self, record: Category | Subcategory) -> Category | Subcategory:
        """Create a single category or subcategory"""
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def delete(self, record: Category | Subcategory) -> None:
        """Delete a category or subcategory"""
        self.db.delete(record)
        self.db.commit()
