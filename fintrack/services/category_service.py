from sqlalchemy.orm import Session

from fintrack.core.exceptions import NotFoundException, ValidationException, ForbiddenException
from fintrack.models.category import Category, Subcategory
from fintrack.models.tenant_context import TenantContext
from fintrack.repositories.category_repository import CategoryRepository
from fintrack.schemas.category_schemas import CategoryCreate, SubcategoryCreate
from fintrack.services.audit_logger import AuditLogger, snapshot


class CategoryService:
    """Service for the tenant's category taxonomy"""

    def __init__(self, db: Session, audit_logger: AuditLogger | None = None):
        self.db = db
        self.repo = CategoryRepository(db)
        self.audit_logger = audit_logger or AuditLogger(db)

    def list_categories(self, context: TenantContext) -> list[Category]:
        """Categories in display order with their subcategories"""
        return self.repo.get_by_tenant(context.tenant.id)

    def create_category(self, data: CategoryCreate, context: TenantContext) -> Category:
        """Append a category (and optional subcategories) to the taxonomy"""
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can edit categories")

        tenant_id = context.tenant.id
        category = Category(
            tenant_id=tenant_id,
            name=data.name,
            color=data.color,
            order=self.repo.next_category_order(tenant_id),
        )
        self.repo.create_bulk([category])
        self.repo.create_bulk(
            [
                Subcategory(tenant_id=tenant_id, category_id=category.id, name=name, order=index)
                for index, name in enumerate(data.subcategories)
            ]
        )
        self.db.commit()
        self.db.refresh(category)
        self.audit_logger.log_event(
            tenant_id, "categories", category.id, "create", None, snapshot(category), context.user.id
        )
        return category

    def create_subcategory(
        self, category_id: int, data: SubcategoryCreate, context: TenantContext
    ) -> Subcategory:
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can edit categories")

        category = self._get_category(category_id, context)
        subcategory = self.repo.create(
            Subcategory(
                tenant_id=context.tenant.id,
                category_id=category.id,
                name=data.name,
                order=self.repo.next_subcategory_order(category.id),
            )
        )
        self.audit_logger.log_event(
            context.tenant.id,
            "subcategories",
            subcategory.id,
            "create",
            None,
            snapshot(subcategory),
            context.user.id,
        )
        return subcategory

    def delete_category(self, category_id: int, context: TenantContext) -> None:
        """
        Delete a category.

        Raises:
            ValidationException: While subcategories, expenses or budgets still reference it
        """
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can edit categories")

        category = self._get_category(category_id, context)
        if self.repo.count_subcategories(category.id) > 0:
            raise ValidationException("Cannot delete a category that still has subcategories")
        if self.repo.count_references(context.tenant.id, category_id=category.id) > 0:
            raise ValidationException("Cannot delete a category used by expenses or budgets")

        before = snapshot(category)
        self.repo.delete(category)
        self.audit_logger.log_event(
            context.tenant.id, "categories", category_id, "delete", before, None, context.user.id
        )

    def delete_subcategory(self, subcategory_id: int, context: TenantContext) -> None:
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can edit categories")

        subcategory = self.repo.get_subcategory(subcategory_id, context.tenant.id)
        if not subcategory:
            raise NotFoundException("Subcategory not found")
        if self.repo.count_references(context.tenant.id, subcategory_id=subcategory.id) > 0:
            raise ValidationException("Cannot delete a subcategory used by expenses or budgets")

        before = snapshot(subcategory)
        self.repo.delete(subcategory)
        self.audit_logger.log_event(
            context.tenant.id, "subcategories", subcategory_id, "delete", before, None, context.user.id
        )

    def _get_category(self, category_id: int, context: TenantContext) -> Category:
        category = self.repo.get_by_id_and_tenant(category_id, context.tenant.id)
        if not category:
            raise NotFoundException("Category not found")
        return category
