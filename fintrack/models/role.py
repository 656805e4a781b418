"""Tenant role and membership status enums for role-based access control."""

from enum import Enum as PyEnum


class TenantRole(str, PyEnum):
    """
    Tenant membership roles with hierarchical permissions.

    Role Hierarchy (highest to lowest):
    1. OWNER - Full control, assigned once at provisioning, immutable
    2. ADMIN - Manage data, invite/revoke users (except owner)
    3. MEMBER - Record and edit postings, cannot manage users
    """

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class MembershipStatus(str, PyEnum):
    """Lifecycle of a membership. Revoked memberships are kept for audit."""

    ACTIVE = "active"
    INVITED = "invited"
    REVOKED = "revoked"
