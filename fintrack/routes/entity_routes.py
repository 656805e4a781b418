from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fintrack.database import get_db
from fintrack.dependencies import get_tenant_context
from fintrack.models.tenant_context import TenantContext
from fintrack.services.entity_service import EntityService
from fintrack.schemas.entity_schemas import EntityResolveRequest, EntityResponse

router = APIRouter()


@router.get("/", response_model=list[EntityResponse])
def list_entities(
    name: Optional[str] = Query(None, description="Filter by name (partial match)"),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = EntityService(db)
    return service.list_entities(context, name)


@router.post("/resolve", response_model=EntityResponse)
def resolve_entity(
    data: EntityResolveRequest,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Find a counterparty by tax id, then by exact name; create it if neither matches.
    """
    service = EntityService(db)
    return service.resolve(data, context)
