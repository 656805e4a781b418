from pydantic import BaseModel, Field, EmailStr
from datetime import datetime
from fintrack.models.role import TenantRole, MembershipStatus
from fintrack.models.tenant import TenantType, TenantStatus
from fintrack.models.license import LicensePlan


class TenantProvisionRequest(BaseModel):
    """Sign up for a plan: creates tenant, owner membership, license and categories"""

    plan_id: LicensePlan = Field(default=LicensePlan.DEMO)
    email: EmailStr
    display_name: str = Field(..., min_length=1, max_length=255)


class TenantProvisionResponse(BaseModel):
    tenant_id: int
    status: TenantStatus


class TenantCompleteRequest(BaseModel):
    """Resume provisioning of a pending/partially provisioned tenant"""

    plan_id: LicensePlan | None = Field(
        default=None, description="Must match the plan chosen at signup when given"
    )


class TenantResponse(BaseModel):
    """Tenant details response"""

    id: int
    type: TenantType
    name: str
    base_currency: str
    status: TenantStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserTenantResponse(BaseModel):
    """Tenant the user belongs to, with the user's role in it"""

    id: int
    name: str
    status: TenantStatus
    role: TenantRole
    created_at: datetime
    updated_at: datetime


class TenantUpdate(BaseModel):
    """Update tenant name (OWNER only)"""

    name: str = Field(..., min_length=1, max_length=255)


class TenantMemberResponse(BaseModel):
    """Tenant member details with user info"""

    id: int
    user_id: int
    auth_user_id: str  # From user.auth_user_id
    role: TenantRole
    status: MembershipStatus
    display_name: str | None = None
    email: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TenantInviteRequest(BaseModel):
    """Invite new member to tenant"""

    auth_user_id: str = Field(..., description="Auth service user ID to invite", min_length=1)
    email: EmailStr | None = None
    display_name: str | None = Field(None, max_length=255)
    role: TenantRole = Field(
        default=TenantRole.MEMBER, description="Role to assign (default: MEMBER)"
    )


class TenantRoleUpdate(BaseModel):
    """Update member's role (OWNER only)"""

    role: TenantRole = Field(..., description="New role to assign")


class TenantMemberRemoveResponse(BaseModel):
    """Response after revoking a member"""

    message: str
    removed_user_id: int
