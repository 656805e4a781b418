from sqlalchemy.orm import Session
from fintrack.models.license import License, LicenseStatus


class LicenseRepository:
    """Repository for License model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_tenant(self, tenant_id: int) -> list[License]:
        """Get all licenses for a tenant"""
        return (
            self.db.query(License)
            .filter(License.tenant_id == tenant_id)
            .order_by(License.id)
            .all()
        )

    def get_active(self, tenant_id: int) -> License | None:
        """Get the tenant's active license, if any"""
        return (
            self.db.query(License)
            .filter(License.tenant_id == tenant_id, License.status == LicenseStatus.ACTIVE)
            .order_by(License.id.desc())
            .first()
        )

    def create_no_commit(self, license_: License) -> License:
        """Add license without committing (for atomic ops)"""
        self.db.add(license_)
        self.db.flush()
        return license_
