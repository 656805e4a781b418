# Import every model so Base.metadata and string relationships are complete
from fintrack.models.base import Base
from fintrack.models.user import User
from fintrack.models.tenant import Tenant, TenantType, TenantStatus
from fintrack.models.tenant_membership import TenantMembership
from fintrack.models.license import License, LicensePlan, LicenseStatus
from fintrack.models.category import Category, Subcategory
from fintrack.models.entity import Entity, EntityType
from fintrack.models.posting import Expense, Income
from fintrack.models.budget import Budget
from fintrack.models.fx_rate import FxRate
from fintrack.models.receipt_fingerprint import ReceiptFingerprint
from fintrack.models.audit_log import AuditLog

__all__ = [
    "Base",
    "User",
    "Tenant",
    "TenantType",
    "TenantStatus",
    "TenantMembership",
    "License",
    "LicensePlan",
    "LicenseStatus",
    "Category",
    "Subcategory",
    "Entity",
    "EntityType",
    "Expense",
    "Income",
    "Budget",
    "FxRate",
    "ReceiptFingerprint",
    "AuditLog",
]
