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
    IncomeCreate,
    IncomeResponse,
    IncomeListResponse,
    RecordResponse,
)

router = APIRouter()


@router.post("/", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
def record_income(
    income_data: IncomeCreate,
    context: TenantContext = Depends(get_tenant_context),
    recorder: LedgerRecorder = Depends(get_ledger_recorder),
):
    """Record an income, converted to the tenant base currency"""
    result = recorder.record(context.tenant.id, context.user.id, income_data, PostingKind.INCOME)
    return RecordResponse(
        posting_ids=result.posting_ids,
        count=len(result.posting_ids),
        audit_failures=len(result.audit_failures),
    )


@router.get("/", response_model=IncomeListResponse)
def list_incomes(
    start_date: Optional[date] = Query(None, description="Start date (inclusive)"),
    end_date: Optional[date] = Query(None, description="End date (inclusive)"),
    entity_id: Optional[int] = Query(None, description="Filter by counterparty"),
    limit: int = Query(100, ge=1, le=1000, description="Max results"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = PostingService(db, PostingKind.INCOME)
    incomes, total = service.get_postings(
        context=context,
        start_date=start_date,
        end_date=end_date,
        entity_id=entity_id,
        limit=limit,
        offset=offset,
    )
    return IncomeListResponse(incomes=incomes, total=total)


@router.get("/{income_id}", response_model=IncomeResponse)
def get_income(
    income_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = PostingService(db, PostingKind.INCOME)
    return service.get_posting(income_id, context)


@router.delete("/{income_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_income(
    income_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """Soft-delete an income"""
    service = PostingService(db, PostingKind.INCOME, audit_logger)
    service.delete_posting(income_id, context)
