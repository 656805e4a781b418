from sqlalchemy.orm import Session
from fintrack.models.audit_log import AuditLog


class AuditLogRepository:
    """Append-only access to audit_logs. There is no update or delete."""

    def __init__(self, db: Session):
        self.db = db

    def append(self, log: AuditLog) -> AuditLog:
        """Insert one audit entry and commit it on its own"""
        self.db.add(log)
        self.db.commit()
        return log

    def get_for_entity(self, tenant_id: int, entity_type: str, entity_id: str) -> list[AuditLog]:
        return (
            self.db.query(AuditLog)
            .filter(
                AuditLog.tenant_id == tenant_id,
                AuditLog.entity_type == entity_type,
                AuditLog.entity_id == entity_id,
            )
            .order_by(AuditLog.id)
            .all()
        )

    def get_by_tenant(self, tenant_id: int, limit: int = 100) -> list[AuditLog]:
        return (
            self.db.query(AuditLog)
            .filter(AuditLog.tenant_id == tenant_id)
            .order_by(AuditLog.id.desc())
            .limit(limit)
            .all()
        )
