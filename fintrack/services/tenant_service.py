from sqlalchemy.orm import Session
from fintrack.models.tenant import Tenant
from fintrack.models.tenant_membership import TenantMembership
from fintrack.models.user import User
from fintrack.models.tenant_context import TenantContext
from fintrack.models.role import TenantRole, MembershipStatus
from fintrack.repositories.tenant_repository import TenantRepository
from fintrack.repositories.tenant_membership_repository import TenantMembershipRepository
from fintrack.repositories.license_repository import LicenseRepository
from fintrack.repositories.user_repository import UserRepository
from fintrack.schemas.tenant_schemas import (
    TenantUpdate,
    TenantInviteRequest,
    TenantRoleUpdate,
)
from fintrack.services.audit_logger import AuditLogger, snapshot
from fintrack.core.exceptions import (
    NotFoundException,
    ForbiddenException,
    ValidationException,
)


class TenantService:
    """Service layer for tenant management business logic"""

    def __init__(self, db: Session, audit_logger: AuditLogger | None = None):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.membership_repo = TenantMembershipRepository(db)
        self.license_repo = LicenseRepository(db)
        self.user_repo = UserRepository(db)
        self.audit_logger = audit_logger or AuditLogger(db)

    def list_user_tenants(self, user: User) -> list[dict]:
        """
        List all tenants that a user belongs to.

        Args:
            user: Authenticated user

        Returns:
            List of tenants with user's role in each tenant
        """
        memberships = self.membership_repo.get_user_memberships(user.id)

        result = []
        for membership in memberships:
            tenant = self.tenant_repo.get_by_id(membership.tenant_id)
            if tenant:
                result.append(
                    {
                        "id": tenant.id,
                        "name": tenant.name,
                        "status": tenant.status,
                        "role": membership.role,
                        "created_at": tenant.created_at,
                        "updated_at": tenant.updated_at,
                    }
                )
        return result

    def get_current_tenant(self, context: TenantContext) -> Tenant:
        """Get current tenant details."""
        return context.tenant

    def update_tenant(
        self, tenant_update: TenantUpdate, context: TenantContext
    ) -> Tenant:
        """
        Update tenant name (OWNER only).

        Raises:
            ForbiddenException: If user is not OWNER
        """
        if not context.is_owner():
            raise ForbiddenException("Only owner can update tenant details")

        before = snapshot(context.tenant)
        context.tenant.name = tenant_update.name
        tenant = self.tenant_repo.update(context.tenant)
        self.audit_logger.log_event(
            tenant.id, "tenants", tenant.id, "update", before, snapshot(tenant), context.user.id
        )
        return tenant

    def get_members(self, context: TenantContext) -> list[dict]:
        """
        Get all members of current tenant with user details.

        Args:
            context: Tenant context

        Returns:
            List of members with user info
        """
        memberships = self.membership_repo.get_tenant_members(context.tenant.id)
        return [self.member_view(membership) for membership in memberships]

    def member_view(self, membership: TenantMembership) -> dict:
        user = self.user_repo.get_by_id(membership.user_id)
        return {
            "id": membership.id,
            "user_id": membership.user_id,
            "auth_user_id": user.auth_user_id if user else "unknown",
            "role": membership.role,
            "status": membership.status,
            "display_name": membership.display_name,
            "email": membership.email,
            "created_at": membership.created_at,
        }

    def invite_member(
        self, invite_request: TenantInviteRequest, context: TenantContext
    ) -> TenantMembership:
        """
        Invite new member to tenant (ADMIN or OWNER).

        The license seat limit is checked here; members are never removed
        retroactively when a limit shrinks.

        Raises:
            ForbiddenException: If user lacks admin permissions or tries to grant OWNER
            ValidationException: If user is already a member or no seat is free
        """
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can invite members")

        # Owner is assigned once at provisioning
        if invite_request.role == TenantRole.OWNER:
            raise ForbiddenException("The owner role cannot be granted")

        license_ = self.license_repo.get_active(context.tenant.id)
        if not license_:
            raise ValidationException("Tenant has no active license")
        if self.membership_repo.count_seats(context.tenant.id) >= license_.max_users:
            raise ValidationException(
                f"License allows at most {license_.max_users} users"
            )

        # Get or create user by auth_user_id
        user = self.user_repo.get_or_create_by_auth_id(
            invite_request.auth_user_id,
            email=invite_request.email,
            display_name=invite_request.display_name,
        )

        existing = self.membership_repo.get_membership(user.id, context.tenant.id)
        if existing and existing.status != MembershipStatus.REVOKED:
            raise ValidationException(
                f"User {invite_request.auth_user_id} is already a member"
            )

        # Committed together with the membership below
        self.user_repo.attach_tenant(user, context.tenant.id)

        if existing:
            # Re-invite a revoked member
            before = snapshot(existing)
            existing.role = invite_request.role
            existing.status = MembershipStatus.INVITED
            membership = self.membership_repo.update(existing)
        else:
            before = None
            membership = self.membership_repo.create(
                TenantMembership(
                    tenant_id=context.tenant.id,
                    user_id=user.id,
                    role=invite_request.role,
                    status=MembershipStatus.INVITED,
                    display_name=invite_request.display_name or user.display_name,
                    email=invite_request.email or user.email,
                )
            )

        self.audit_logger.log_event(
            context.tenant.id,
            "memberships",
            membership.id,
            "invite",
            before,
            snapshot(membership),
            context.user.id,
        )
        return membership

    def update_member_role(
        self, user_id: int, role_update: TenantRoleUpdate, context: TenantContext
    ) -> TenantMembership:
        """
        Update member's role (OWNER only).

        Raises:
            ForbiddenException: If user is not OWNER, or the owner role is involved
            NotFoundException: If membership not found
        """
        if not context.is_owner():
            raise ForbiddenException("Only owner can change member roles")

        membership = self.membership_repo.get_membership(user_id, context.tenant.id)
        if not membership or membership.status == MembershipStatus.REVOKED:
            raise NotFoundException("Member not found in this tenant")

        # Cannot modify self (check first for better error message)
        if user_id == context.user.id:
            raise ForbiddenException("Cannot change your own role")

        if membership.role == TenantRole.OWNER:
            raise ForbiddenException("Cannot change owner's role")

        if role_update.role == TenantRole.OWNER:
            raise ForbiddenException("The owner role cannot be granted")

        before = snapshot(membership)
        membership.role = role_update.role
        membership = self.membership_repo.update(membership)
        self.audit_logger.log_event(
            context.tenant.id,
            "memberships",
            membership.id,
            "update",
            before,
            snapshot(membership),
            context.user.id,
        )
        return membership

    def remove_member(self, user_id: int, context: TenantContext) -> None:
        """
        Revoke a member's access (ADMIN or OWNER). The row is kept as REVOKED.

        Raises:
            ForbiddenException: If user lacks permissions or trying to remove owner
            NotFoundException: If membership not found
        """
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can remove members")

        membership = self.membership_repo.get_membership(user_id, context.tenant.id)
        if not membership or membership.status == MembershipStatus.REVOKED:
            raise NotFoundException("Member not found in this tenant")

        # Cannot remove self (check first for better error message)
        if user_id == context.user.id:
            raise ForbiddenException("Cannot remove yourself from tenant")

        if membership.role == TenantRole.OWNER:
            raise ForbiddenException("Cannot remove owner from tenant")

        before = snapshot(membership)
        membership.status = MembershipStatus.REVOKED
        membership = self.membership_repo.update(membership)
        self.audit_logger.log_event(
            context.tenant.id,
            "memberships",
            membership.id,
            "revoke",
            before,
            snapshot(membership),
            context.user.id,
        )
