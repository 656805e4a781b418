from sqlalchemy.orm import Session

from fintrack.models.entity import Entity
from fintrack.models.tenant_context import TenantContext
from fintrack.repositories.entity_repository import EntityRepository
from fintrack.schemas.entity_schemas import EntityResolveRequest
from fintrack.services.entity_resolver import EntityResolver


class EntityService:
    """Standalone access to the tenant's counterparties"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EntityRepository(db)
        self.resolver = EntityResolver(db)

    def list_entities(self, context: TenantContext, name: str | None = None) -> list[Entity]:
        return self.repo.get_by_tenant(context.tenant.id, name)

    def resolve(self, data: EntityResolveRequest, context: TenantContext) -> Entity:
        """Resolve (or create) a counterparty outside of a posting, committing it."""
        entity_id = self.resolver.resolve(
            context.tenant.id, data.name, data.tax_id, data.entity_type
        )
        self.db.commit()
        return self.repo.get_by_id_and_tenant(entity_id, context.tenant.id)
