from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from fintrack.database import get_db
from fintrack.dependencies import get_tenant_context, get_ledger_recorder, get_audit_logger
from fintrack.models.posting import PostingKind
from fintrack.models.tenant_context import TenantContext
from fintrack.services.audit_logger import AuditLogger
from fintrack.services.ledger_recorder import LedgerRecorder
from fintrack.services.posting_service import PostingService
from fintrack.schemas.posting_schemas import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    ExpenseListResponse,
    RecordResponse,
)

router = APIRouter()


@router.post("/", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
def record_expense(
    expense_data: ExpenseCreate,
    context: TenantContext = Depends(get_tenant_context),
    recorder: LedgerRecorder = Depends(get_ledger_recorder),
):
    """
    Record an expense.

    - Amount is converted to the tenant base currency
    - The counterparty is resolved by tax id or name, or created
    - `installments` > 1 (credit card only) creates one posting per month
    - All postings are written atomically, or none
    """
    result = recorder.record(
        context.tenant.id, context.user.id, expense_data, PostingKind.EXPENSE
    )
    return RecordResponse(
        posting_ids=result.posting_ids,
        count=len(result.posting_ids),
        audit_failures=len(result.audit_failures),
    )


@router.get("/", response_model=ExpenseListResponse)
def list_expenses(
    start_date: Optional[date] = Query(None, description="Start date (inclusive)"),
    end_date: Optional[date] = Query(None, description="End date (inclusive)"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    entity_id: Optional[int] = Query(None, description="Filter by counterparty"),
    include_deleted: bool = Query(False, description="Include soft-deleted expenses"),
    limit: int = Query(100, ge=1, le=1000, description="Max results"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    List expenses with optional filters.

    - Returns only expenses of the current tenant
    - Results sorted by date (newest first)
    """
    service = PostingService(db, PostingKind.EXPENSE)
    expenses, total = service.get_postings(
        context=context,
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        entity_id=entity_id,
        include_deleted=include_deleted,
        limit=limit,
        offset=offset,
    )
    return ExpenseListResponse(expenses=expenses, total=total)


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Get a specific expense by ID.

    - Returns 404 if expense doesn't exist or doesn't belong to tenant
    """
    service = PostingService(db, PostingKind.EXPENSE)
    return service.get_posting(expense_id, context)


@router.patch("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Update category, payment method or notes of an expense.

    - Only provided fields are updated (partial update)
    """
    service = PostingService(db, PostingKind.EXPENSE, audit_logger)
    return service.update_expense(expense_id, expense_data, context)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Soft-delete an expense.

    - The expense no longer counts towards budgets
    """
    service = PostingService(db, PostingKind.EXPENSE, audit_logger)
    service.delete_posting(expense_id, context)
