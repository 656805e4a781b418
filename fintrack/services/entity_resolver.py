import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fintrack.core.exceptions import ValidationException
from fintrack.models.entity import Entity, EntityType
from fintrack.repositories.entity_repository import EntityRepository

logger = logging.getLogger(__name__)

TAX_ID_LENGTH = 11
_TAX_ID_SEPARATORS = re.compile(r"[\s\-.]")


def normalize_tax_id(tax_id: str | None) -> str | None:
    """
    Strip separators from a tax id and check it has exactly 11 digits.

    Returns None for empty input.

    Raises:
        ValidationException: If a non-empty tax id is not 11 digits
    """
    if tax_id is None:
        return None
    cleaned = _TAX_ID_SEPARATORS.sub("", tax_id)
    if not cleaned:
        return None
    if len(cleaned) != TAX_ID_LENGTH or not cleaned.isdigit():
        raise ValidationException(f"Tax id must have {TAX_ID_LENGTH} digits")
    return cleaned


class EntityResolver:
    """
    Finds or creates the counterparty of a posting.

    Lookup order: exact tax id, then exact (case-sensitive) name, then create.
    New entities are flushed into the caller's transaction so they commit or
    roll back together with the postings that reference them.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = EntityRepository(db)

    def resolve(
        self,
        tenant_id: int,
        name: str,
        tax_id: str | None = None,
        entity_type: EntityType = EntityType.MERCHANT,
    ) -> int:
        """
        Resolve a counterparty to an entity ID.

        Args:
            tenant_id: Tenant to search in
            name: Counterparty display name
            tax_id: Optional 11-digit tax id
            entity_type: Kind used when a new entity is created

        Returns:
            ID of the existing or newly created entity

        Raises:
            ValidationException: If name is blank or tax id malformed
        """
        name = (name or "").strip()
        if not name:
            raise ValidationException("Entity name is required")
        tax_id = normalize_tax_id(tax_id)

        if tax_id:
            entity = self.repo.get_by_tax_id(tenant_id, tax_id)
            if entity:
                return entity.id

        entity = self.repo.get_by_name(tenant_id, name)
        if entity:
            return entity.id

        return self._create(tenant_id, name, tax_id, entity_type)

    def _create(
        self, tenant_id: int, name: str, tax_id: str | None, entity_type: EntityType
    ) -> int:
        entity = Entity(
            tenant_id=tenant_id,
            tax_id=tax_id,
            name=name,
            entity_type=entity_type,
            pending_tax_id=tax_id is None,
        )
        try:
            with self.db.begin_nested():
                self.repo.create_no_commit(entity)
        except IntegrityError:
            # A concurrent writer inserted the same tax id first
            if tax_id is None:
                raise
            winner = self.repo.get_by_tax_id(tenant_id, tax_id)
            if winner is None:
                raise
            logger.info("Entity tax id %s already created concurrently; reusing %s", tax_id, winner.id)
            return winner.id

        logger.info("Created entity %s for tenant %s", entity.id, tenant_id)
        return entity.id
