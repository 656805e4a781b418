"""Append-only audit trail for mutations.

Audit emission never blocks or undoes the primary write: it runs after the
caller has committed, and failures travel through ``on_error`` instead of
being raised.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fintrack.core.exceptions import AuditWriteException
from fintrack.models.audit_log import AuditLog
from fintrack.repositories.audit_log_repository import AuditLogRepository

logger = logging.getLogger(__name__)


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def snapshot(record: Any) -> dict[str, Any]:
    """Column values of an ORM object as a plain dict (relationships excluded)."""
    mapper = inspect(record).mapper
    return {column.key: getattr(record, column.key) for column in mapper.column_attrs}


def _report_to_log(error: AuditWriteException) -> None:
    logger.warning("Audit event dropped: %s", error)


class AuditLogger:
    """Writes AuditLog rows; never raises to the caller."""

    def __init__(
        self,
        db: Session,
        on_error: Callable[[AuditWriteException], None] | None = None,
    ):
        self.db = db
        self.repo = AuditLogRepository(db)
        self.on_error = on_error or _report_to_log

    def log_event(
        self,
        tenant_id: int,
        entity_type: str,
        entity_id: int | str,
        action: str,
        before: dict | None,
        after: dict | None,
        actor_id: int | None,
    ) -> AuditWriteException | None:
        """
        Store one audit entry.

        Args:
            tenant_id: Tenant the mutated record belongs to
            entity_type: Table/collection name, e.g. "expenses"
            entity_id: ID of the mutated record
            action: create, update, delete, soft-delete, invite, revoke, provision
            before: Snapshot before the mutation (None for creates)
            after: Snapshot after the mutation (None for deletes)
            actor_id: User who performed the mutation

        Returns:
            None on success, otherwise the AuditWriteException that was reported
        """
        try:
            log = AuditLog(
                tenant_id=tenant_id,
                entity_type=entity_type,
                entity_id=str(entity_id),
                action=action,
                before=json.dumps(before, default=_default) if before is not None else None,
                after=json.dumps(after, default=_default) if after is not None else None,
                actor_id=actor_id,
            )
            self.repo.append(log)
        except (SQLAlchemyError, TypeError, ValueError) as e:
            self.db.rollback()
            error = AuditWriteException(entity_type, str(entity_id), action, str(e))
            logger.exception("Audit write failed for %s/%s", entity_type, entity_id)
            self.on_error(error)
            return error
        return None
