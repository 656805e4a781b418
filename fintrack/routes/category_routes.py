from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fintrack.database import get_db
from fintrack.dependencies import get_tenant_context, get_audit_logger
from fintrack.models.tenant_context import TenantContext
from fintrack.services.audit_logger import AuditLogger
from fintrack.services.category_service import CategoryService
from fintrack.schemas.category_schemas import (
    CategoryCreate,
    CategoryResponse,
    SubcategoryCreate,
    SubcategoryResponse,
)

router = APIRouter()


@router.get("/", response_model=list[CategoryResponse])
def list_categories(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Get the tenant's categories with their subcategories, in display order"""
    service = CategoryService(db)
    return service.list_categories(context)


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    data: CategoryCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """Create a category. Requires ADMIN or OWNER."""
    service = CategoryService(db, audit_logger)
    return service.create_category(data, context)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Delete a category.

    - Returns 400 while the category still has subcategories
    """
    service = CategoryService(db, audit_logger)
    service.delete_category(category_id, context)


@router.post(
    "/{category_id}/subcategories",
    response_model=SubcategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_subcategory(
    category_id: int,
    data: SubcategoryCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    service = CategoryService(db, audit_logger)
    return service.create_subcategory(category_id, data, context)


@router.delete("/subcategories/{subcategory_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subcategory(
    subcategory_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    service = CategoryService(db, audit_logger)
    service.delete_subcategory(subcategory_id, context)
