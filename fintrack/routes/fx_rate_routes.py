from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fintrack.database import get_db
from fintrack.dependencies import get_tenant_context, get_audit_logger
from fintrack.models.tenant_context import TenantContext
from fintrack.services.audit_logger import AuditLogger
from fintrack.services.fx_rate_service import FxRateService
from fintrack.schemas.fx_rate_schemas import FxRateCreate, FxRateResponse

router = APIRouter()


@router.get("/", response_model=list[FxRateResponse])
def list_rates(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = FxRateService(db)
    return service.list_rates(context)


@router.post("/", response_model=FxRateResponse, status_code=status.HTTP_201_CREATED)
def create_rate(
    data: FxRateCreate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Store an exchange rate for the tenant.

    - Used for postings dated on or after `date`, ahead of the external provider
    - Requires ADMIN or OWNER permissions
    """
    service = FxRateService(db, audit_logger)
    return service.create_rate(data, context)
