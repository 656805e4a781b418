from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fintrack.database import get_db
from fintrack.dependencies import get_tenant_context, get_current_user, get_audit_logger
from fintrack.models.tenant_context import TenantContext
from fintrack.models.tenant import TenantStatus
from fintrack.models.user import User
from fintrack.services.audit_logger import AuditLogger
from fintrack.services.tenant_provisioner import TenantProvisioner
from fintrack.services.tenant_service import TenantService
from fintrack.schemas.tenant_schemas import (
    TenantProvisionRequest,
    TenantProvisionResponse,
    TenantCompleteRequest,
    TenantResponse,
    TenantUpdate,
    TenantMemberResponse,
    TenantInviteRequest,
    TenantRoleUpdate,
    TenantMemberRemoveResponse,
    UserTenantResponse,
)

router = APIRouter()


@router.post("", response_model=TenantProvisionResponse, status_code=status.HTTP_201_CREATED)
async def provision_tenant(
    request: TenantProvisionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Sign up for a plan.

    Creates the tenant with the caller as OWNER, then the license and the
    default categories. If the second step fails the response is 409 and
    the tenant can be finished with `POST /api/tenants/{id}/complete`.
    """
    provisioner = TenantProvisioner(db, audit_logger)
    tenant_id = provisioner.provision(user, request.email, request.display_name, request.plan_id)
    return {"tenant_id": tenant_id, "status": TenantStatus.ACTIVE}


@router.get("", response_model=list[UserTenantResponse])
async def list_user_tenants(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List all tenants the authenticated user belongs to.

    Returns list of tenants with the user's role in each tenant.
    This endpoint does not require a tenant context - it lists ALL tenants
    the user is a member of, which is useful for tenant switching.
    """
    service = TenantService(db)
    return service.list_user_tenants(user)


@router.get("/incomplete", response_model=list[TenantResponse])
async def list_incomplete_tenants(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Tenants owned by the caller whose provisioning has to be completed"""
    provisioner = TenantProvisioner(db)
    return provisioner.find_incomplete(user)


@router.post("/{tenant_id}/complete", response_model=TenantProvisionResponse)
async def complete_provisioning(
    tenant_id: int,
    request: TenantCompleteRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Finish provisioning of a pending or partially provisioned tenant.

    - **Only the tenant owner**
    """
    provisioner = TenantProvisioner(db, audit_logger)
    provisioner.complete_provisioning(tenant_id, request.plan_id, user)
    return {"tenant_id": tenant_id, "status": TenantStatus.ACTIVE}


@router.get("/me", response_model=TenantResponse)
async def get_current_tenant(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Get current tenant details.

    Returns tenant information for the authenticated user's current tenant.
    """
    service = TenantService(db)
    return service.get_current_tenant(context)


@router.patch("/me", response_model=TenantResponse)
async def update_tenant(
    tenant_update: TenantUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Update tenant name.

    - **Requires OWNER permissions**
    - Only tenant name can be updated via this endpoint
    """
    service = TenantService(db, audit_logger)
    return service.update_tenant(tenant_update, context)


@router.get("/me/members", response_model=list[TenantMemberResponse])
async def list_members(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    List all members of current tenant, revoked ones included.

    Available to all authenticated members.
    """
    service = TenantService(db)
    return service.get_members(context)


@router.post(
    "/me/members",
    response_model=TenantMemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    invite_request: TenantInviteRequest,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Invite new member to tenant.

    - **Requires ADMIN or OWNER permissions**
    - Default role: MEMBER; OWNER cannot be granted
    - Rejected once the license seat limit is reached
    - User will be auto-created if doesn't exist
    """
    service = TenantService(db, audit_logger)
    membership = service.invite_member(invite_request, context)
    return service.member_view(membership)


@router.patch("/me/members/{user_id}/role", response_model=TenantMemberResponse)
async def update_member_role(
    user_id: int,
    role_update: TenantRoleUpdate,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Update member's role.

    - **Requires OWNER permissions**
    - Cannot change OWNER's role
    - Cannot change your own role
    """
    service = TenantService(db, audit_logger)
    membership = service.update_member_role(user_id, role_update, context)
    return service.member_view(membership)


@router.delete(
    "/me/members/{user_id}",
    response_model=TenantMemberRemoveResponse,
    status_code=status.HTTP_200_OK,
)
async def remove_member(
    user_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Revoke a member's access.

    - **Requires ADMIN or OWNER permissions**
    - Cannot remove OWNER
    - Cannot remove yourself
    """
    service = TenantService(db, audit_logger)
    service.remove_member(user_id, context)

    return {
        "message": "Member removed successfully",
        "removed_user_id": user_id,
    }
