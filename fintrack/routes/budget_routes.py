from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from fintrack.database import get_db
from fintrack.dependencies import get_tenant_context, get_audit_logger
from fintrack.models.tenant_context import TenantContext
from fintrack.services.audit_logger import AuditLogger
from fintrack.services.budget_service import BudgetService
from fintrack.schemas.budget_schemas import (
    BudgetCreate,
    BudgetUpdate,
    BudgetResponse,
    BudgetStatusResponse,
)

router = APIRouter()


@router.post("/", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
def create_budget(
    data: BudgetCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Create a monthly budget for a category.

    - One budget per category and month (409 otherwise)
    - `carry_over` moves last month's unspent amount into `rollover_in`
    - Requires ADMIN or OWNER permissions
    """
    service = BudgetService(db, audit_logger)
    return service.create_budget(data, context)


@router.get("/", response_model=list[BudgetResponse])
def list_budgets(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = BudgetService(db)
    return service.get_budgets(context, year, month)


@router.get("/status", response_model=list[BudgetStatusResponse])
def get_period_status(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Spent and remaining for every budget of the month"""
    service = BudgetService(db)
    return service.get_period_status(context, year, month)


@router.get("/status/{category_id}", response_model=BudgetStatusResponse)
def get_category_status(
    category_id: int,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Spent and remaining for one category.

    - A category without a budget reports allocated 0 and percentage 0
    - `display_percentage` is capped at 100
    """
    service = BudgetService(db)
    return service.get_status(context, category_id, year, month)


@router.patch("/{budget_id}", response_model=BudgetResponse)
def update_budget(
    budget_id: int,
    data: BudgetUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    service = BudgetService(db, audit_logger)
    return service.update_budget(budget_id, data, context)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    service = BudgetService(db, audit_logger)
    service.delete_budget(budget_id, context)
