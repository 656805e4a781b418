from sqlalchemy.orm import Session

from fintrack.models.fx_rate import FxRate
from fintrack.models.tenant_context import TenantContext
from fintrack.repositories.fx_rate_repository import FxRateRepository
from fintrack.schemas.fx_rate_schemas import FxRateCreate
from fintrack.services.audit_logger import AuditLogger, snapshot
from fintrack.core.exceptions import ForbiddenException, ValidationException


class FxRateService:
    """Tenant-maintained exchange rates used ahead of the external provider"""

    def __init__(self, db: Session, audit_logger: AuditLogger | None = None):
        self.db = db
        self.repo = FxRateRepository(db)
        self.audit_logger = audit_logger or AuditLogger(db)

    def list_rates(self, context: TenantContext) -> list[FxRate]:
        return self.repo.get_by_tenant(context.tenant.id)

    def create_rate(self, data: FxRateCreate, context: TenantContext) -> FxRate:
        """
        Store a rate for `code` against the tenant base currency.

        Raises:
            ForbiddenException: If user is not ADMIN or OWNER
            ValidationException: If code is the base currency itself
        """
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can manage exchange rates")

        code = data.code.upper()
        if code == context.tenant.base_currency:
            raise ValidationException(f"{code} is the tenant base currency")

        rate = self.repo.create(
            FxRate(tenant_id=context.tenant.id, code=code, date=data.date, rate=data.rate)
        )
        self.audit_logger.log_event(
            context.tenant.id, "fx_rates", rate.id, "create", None, snapshot(rate), context.user.id
        )
        return rate
