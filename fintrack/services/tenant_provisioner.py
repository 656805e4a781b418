"""Tenant bootstrap: tenant, owner membership, license and category taxonomy.

Provisioning runs in two independently committed phases:

1. tenant (PENDING) + owner membership + user.tenant_ids
2. license + default categories + status ACTIVE

Phase 2 is only allowed once the owner membership exists. If it fails the
tenant is marked PARTIALLY_PROVISIONED and PartialProvisionException is
raised; complete_provisioning() resumes it. There is no automatic retry.
"""

import logging
from datetime import datetime, timedelta, UTC

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fintrack.config import settings
from fintrack.core.exceptions import (
    NotFoundException,
    PartialProvisionException,
    PermissionDeniedException,
    ValidationException,
)
from fintrack.default_categories import DEFAULT_CATEGORIES
from fintrack.models.category import Category, Subcategory
from fintrack.models.license import License, LicensePlan, LicenseStatus, PLAN_MAX_USERS
from fintrack.models.role import TenantRole, MembershipStatus
from fintrack.models.tenant import Tenant, TenantStatus, TenantType
from fintrack.models.tenant_membership import TenantMembership
from fintrack.models.user import User
from fintrack.repositories.category_repository import CategoryRepository
from fintrack.repositories.license_repository import LicenseRepository
from fintrack.repositories.tenant_membership_repository import TenantMembershipRepository
from fintrack.repositories.tenant_repository import TenantRepository
from fintrack.repositories.user_repository import UserRepository
from fintrack.services.audit_logger import AuditLogger, snapshot

logger = logging.getLogger(__name__)

PLAN_TENANT_TYPE: dict[LicensePlan, TenantType] = {
    LicensePlan.DEMO: TenantType.PERSONAL,
    LicensePlan.PERSONAL: TenantType.PERSONAL,
    LicensePlan.FAMILIAR: TenantType.FAMILY,
    LicensePlan.EMPRESA: TenantType.COMPANY,
}

RESUMABLE_STATUSES = [TenantStatus.PENDING, TenantStatus.PARTIALLY_PROVISIONED]


def parse_plan(plan_id: str | LicensePlan) -> LicensePlan:
    try:
        return LicensePlan(plan_id)
    except ValueError:
        raise ValidationException(f"Unknown plan '{plan_id}'")


def license_window(plan: LicensePlan, now: datetime) -> tuple[datetime, datetime]:
    """Demo licenses last DEMO_LICENSE_DAYS; paid plans one year."""
    if plan == LicensePlan.DEMO:
        return now, now + timedelta(days=settings.DEMO_LICENSE_DAYS)
    try:
        return now, now.replace(year=now.year + 1)
    except ValueError:
        # Feb 29 -> Feb 28 next year
        return now, now.replace(year=now.year + 1, day=28)


class TenantProvisioner:
    """Creates and activates tenants."""

    def __init__(self, db: Session, audit_logger: AuditLogger | None = None):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.membership_repo = TenantMembershipRepository(db)
        self.license_repo = LicenseRepository(db)
        self.category_repo = CategoryRepository(db)
        self.user_repo = UserRepository(db)
        self.audit_logger = audit_logger or AuditLogger(db)

    def provision(
        self,
        owner: User,
        owner_email: str,
        owner_display_name: str,
        plan_id: str | LicensePlan,
        base_currency: str | None = None,
    ) -> int:
        """
        Provision a new tenant owned by `owner`.

        Args:
            owner: User who signs up and becomes OWNER
            owner_email: Email denormalized on the membership
            owner_display_name: Name denormalized on the membership and used for the tenant name
            plan_id: demo, personal, familiar or empresa
            base_currency: Defaults to DEFAULT_BASE_CURRENCY

        Returns:
            ID of the ACTIVE tenant

        Raises:
            ValidationException: Unknown plan (nothing written)
            PartialProvisionException: Phase 2 failed; tenant left PARTIALLY_PROVISIONED
        """
        plan = parse_plan(plan_id)
        tenant_id = self._create_tenant_and_owner(
            owner, owner_email, owner_display_name, plan, base_currency
        )
        self._activate(tenant_id, plan, owner.id)
        return tenant_id

    def complete_provisioning(
        self, tenant_id: int, plan_id: str | LicensePlan | None, actor: User
    ) -> int:
        """
        Resume phase 2 for a tenant stuck in PENDING or PARTIALLY_PROVISIONED.

        The license is always issued for the plan chosen at signup; plan_id
        may be omitted and must match that plan when given.

        Raises:
            NotFoundException: Tenant does not exist
            PermissionDeniedException: Actor is not the tenant owner
            ValidationException: Tenant is not resumable, already licensed, or plan_id differs
            PartialProvisionException: Phase 2 failed again
        """
        requested = parse_plan(plan_id) if plan_id is not None else None
        tenant = self.tenant_repo.get_by_id(tenant_id)
        if not tenant:
            raise NotFoundException(f"Tenant {tenant_id} not found")
        if tenant.owner_user_id != actor.id:
            raise PermissionDeniedException(
                "complete_provisioning", f"tenants/{tenant_id}", {"actor_id": actor.id}
            )
        if tenant.status not in RESUMABLE_STATUSES:
            raise ValidationException(
                f"Tenant {tenant_id} is {tenant.status.value}; nothing to resume"
            )
        if self.license_repo.get_by_tenant(tenant_id):
            raise ValidationException(f"Tenant {tenant_id} already has a license")

        plan = self._signup_plan(tenant, requested)

        logger.info("Resuming provisioning of tenant %s", tenant_id)
        self._activate(tenant_id, plan, actor.id)
        return tenant_id

    def _signup_plan(self, tenant: Tenant, requested: LicensePlan | None) -> LicensePlan:
        stored = (tenant.settings or {}).get("plan")
        if stored is None:
            # Tenants created before the plan was recorded
            if requested is None or PLAN_TENANT_TYPE[requested] != tenant.type:
                raise ValidationException(
                    f"Plan is required and must match tenant type {tenant.type.value}"
                )
            return requested

        plan = LicensePlan(stored)
        if requested is not None and requested != plan:
            raise ValidationException(
                f"Tenant {tenant.id} was created for plan {plan.value}, not {requested.value}"
            )
        return plan

    def find_incomplete(self, owner: User) -> list[Tenant]:
        """Tenants owned by `owner` whose provisioning must be resumed."""
        return [
            tenant
            for tenant in self.tenant_repo.get_owned_by_user(owner.id, RESUMABLE_STATUSES)
            if self.membership_repo.get_owner(tenant.id) is not None
        ]

    def _create_tenant_and_owner(
        self,
        owner: User,
        email: str,
        display_name: str,
        plan: LicensePlan,
        base_currency: str | None,
    ) -> int:
        """Phase 1: one atomic unit; nothing survives a failure."""
        try:
            tenant = self.tenant_repo.create_no_commit(
                Tenant(
                    type=PLAN_TENANT_TYPE[plan],
                    name=f"{display_name}'s Space",
                    base_currency=(base_currency or settings.DEFAULT_BASE_CURRENCY).upper(),
                    owner_user_id=owner.id,
                    status=TenantStatus.PENDING,
                    settings={"plan": plan.value},
                )
            )
            self.membership_repo.create_no_commit(
                TenantMembership(
                    tenant_id=tenant.id,
                    user_id=owner.id,
                    role=TenantRole.OWNER,
                    status=MembershipStatus.ACTIVE,
                    display_name=display_name,
                    email=email,
                )
            )
            if not owner.email:
                owner.email = email
            if not owner.display_name:
                owner.display_name = display_name
            self.user_repo.attach_tenant(owner, tenant.id)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Provisioning phase 1 failed for user %s", owner.id)
            raise

        logger.info("Provisioning phase 1 committed: tenant %s for user %s", tenant.id, owner.id)
        return tenant.id

    def _activate(self, tenant_id: int, plan: LicensePlan, actor_id: int) -> None:
        """Phase 2: license + taxonomy + ACTIVE as one atomic unit."""
        try:
            if self.membership_repo.get_owner(tenant_id) is None:
                raise PermissionDeniedException(
                    "create_license",
                    f"tenants/{tenant_id}",
                    {"plan": plan.value, "reason": "no owner membership"},
                )

            start, end = license_window(plan, datetime.now(UTC))
            license_ = self.license_repo.create_no_commit(
                License(
                    tenant_id=tenant_id,
                    plan=plan,
                    status=LicenseStatus.ACTIVE,
                    start_date=start,
                    end_date=end,
                    max_users=PLAN_MAX_USERS[plan],
                )
            )
            self._seed_categories(tenant_id)

            tenant = self.tenant_repo.get_by_id(tenant_id)
            tenant.transition_to(TenantStatus.ACTIVE)
            self.db.commit()
        except (SQLAlchemyError, PermissionDeniedException, ValueError) as e:
            self.db.rollback()
            logger.exception("Provisioning phase 2 failed for tenant %s", tenant_id)
            self._mark_partial(tenant_id)
            raise PartialProvisionException(tenant_id, str(e)) from e

        logger.info("Tenant %s active on plan %s (max_users=%s)", tenant_id, plan.value, license_.max_users)
        self.audit_logger.log_event(
            tenant_id, "licenses", license_.id, "provision", None, snapshot(license_), actor_id
        )

    def _seed_categories(self, tenant_id: int) -> None:
        categories = [
            Category(tenant_id=tenant_id, name=item["name"], color=item["color"], order=index)
            for index, item in enumerate(DEFAULT_CATEGORIES)
        ]
        self.category_repo.create_bulk(categories)

        subcategories = [
            Subcategory(tenant_id=tenant_id, category_id=category.id, name=name, order=index)
            for category, item in zip(categories, DEFAULT_CATEGORIES)
            for index, name in enumerate(item["subcategories"])
        ]
        self.category_repo.create_bulk(subcategories)

    def _mark_partial(self, tenant_id: int) -> None:
        try:
            tenant = self.tenant_repo.get_by_id(tenant_id)
            if tenant and tenant.can_transition_to(TenantStatus.PARTIALLY_PROVISIONED):
                tenant.transition_to(TenantStatus.PARTIALLY_PROVISIONED)
                self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Could not mark tenant %s partially provisioned", tenant_id)
