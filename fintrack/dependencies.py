from datetime import datetime, UTC
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from fintrack.core.security import extract_user_id, extract_tenant_id
from fintrack.core.exceptions import UnauthorizedException, ForbiddenException, NotFoundException
from fintrack.database import get_db
from fintrack.repositories.user_repository import UserRepository
from fintrack.repositories.tenant_repository import TenantRepository
from fintrack.repositories.tenant_membership_repository import TenantMembershipRepository
from fintrack.models.user import User
from fintrack.models.role import MembershipStatus
from fintrack.models.tenant import TenantStatus
from fintrack.models.tenant_context import TenantContext
from fintrack.services.audit_logger import AuditLogger
from fintrack.services.currency_normalizer import CurrencyNormalizer
from fintrack.services.fx_provider import RateProvider, HttpRateProvider
from fintrack.services.ledger_recorder import LedgerRecorder

security = HTTPBearer()

# Tenants in these states have finished provisioning and can be entered
ACCESSIBLE_STATUSES = (TenantStatus.ACTIVE, TenantStatus.EXPIRED)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security), db: Session = Depends(get_db)
) -> User:
    """
    FastAPI dependency to validate JWT and get/create user.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Extract auth_user_id from 'sub' claim
    4. Get or auto-create User record in ledger DB
    5. Return User object for use in endpoints

    Raises:
        HTTPException 401: If token invalid or expired
    """
    try:
        token = credentials.credentials
        auth_user_id = extract_user_id(token)

        # Get or create user in ledger DB
        user_repo = UserRepository(db)
        user = user_repo.get_or_create_by_auth_id(auth_user_id)

        return user

    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_tenant_context(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    x_tenant_id: int | None = Header(None, alias="X-Tenant-ID"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TenantContext:
    """
    FastAPI dependency resolving the tenant a request acts on.

    The tenant is taken from the X-Tenant-ID header, then the JWT
    'tenant_id' claim, then the user's first membership. The user must
    hold a non-revoked membership; an invited member is activated on
    first access.

    Raises:
        HTTPException 401: If token invalid
        NotFoundException: If no usable tenant can be found
        ForbiddenException: If the user is not a member or the tenant is not provisioned
    """
    try:
        tenant_id = x_tenant_id or extract_tenant_id(credentials.credentials)
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    membership_repo = TenantMembershipRepository(db)
    if tenant_id is None:
        memberships = membership_repo.get_user_memberships(user.id)
        if not memberships:
            raise NotFoundException("User does not belong to any tenant")
        membership = memberships[0]
    else:
        membership = membership_repo.get_membership(user.id, tenant_id)

    if not membership or membership.status == MembershipStatus.REVOKED:
        raise ForbiddenException("Access to this tenant is not allowed")

    tenant = TenantRepository(db).get_by_id(membership.tenant_id)
    if not tenant:
        raise NotFoundException(f"Tenant {membership.tenant_id} not found")
    if tenant.status not in ACCESSIBLE_STATUSES:
        raise ForbiddenException(f"Tenant {tenant.id} is {tenant.status.value}")

    if membership.status == MembershipStatus.INVITED:
        membership.status = MembershipStatus.ACTIVE
        membership.joined_at = datetime.now(UTC)
        membership = membership_repo.update(membership)

    return TenantContext(user=user, tenant=tenant, role=membership.role)


def get_rate_provider() -> RateProvider:
    """FX provider used by the currency normalizer (overridden in tests)"""
    return HttpRateProvider()


def get_audit_logger(db: Session = Depends(get_db)) -> AuditLogger:
    return AuditLogger(db)


def get_ledger_recorder(
    db: Session = Depends(get_db),
    rate_provider: RateProvider = Depends(get_rate_provider),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> LedgerRecorder:
    return LedgerRecorder(db, CurrencyNormalizer(db, rate_provider), audit_logger)
