from sqlalchemy.orm import Session
from fintrack.models.entity import Entity


class EntityRepository:
    """Repository for counterparty (Entity) data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_tax_id(self, tenant_id: int, tax_id: str) -> Entity | None:
        """Get the tenant's entity with this exact tax id"""
        return (
            self.db.query(Entity)
            .filter(Entity.tenant_id == tenant_id, Entity.tax_id == tax_id)
            .first()
        )

    def get_by_name(self, tenant_id: int, name: str) -> Entity | None:
        """
        Get the tenant's oldest entity with this exact name.

        Case-sensitive; names are not unique so the lowest ID wins.
        """
        return (
            self.db.query(Entity)
            .filter(Entity.tenant_id == tenant_id, Entity.name == name)
            .order_by(Entity.id)
            .first()
        )

    def get_by_id_and_tenant(self, entity_id: int, tenant_id: int) -> Entity | None:
        return (
            self.db.query(Entity)
            .filter(Entity.id == entity_id, Entity.tenant_id == tenant_id)
            .first()
        )

    def get_by_tenant(self, tenant_id: int, name: str | None = None) -> list[Entity]:
        """List entities, optionally filtered by partial name match"""
        query = self.db.query(Entity).filter(Entity.tenant_id == tenant_id)
        if name:
            query = query.filter(Entity.name.ilike(f"%{name}%"))
        return query.order_by(Entity.name, Entity.id).all()

    def create_no_commit(self, entity: Entity) -> Entity:
        """Add entity and flush without committing (joins caller's transaction)"""
        self.db.add(entity)
        self.db.flush()
        return entity
