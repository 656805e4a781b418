from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional
from fintrack.models.entity import EntityType


class EntityResolveRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    tax_id: Optional[str] = Field(None, max_length=20)
    entity_type: EntityType = EntityType.MERCHANT


class EntityResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    tax_id: Optional[str]
    name: str
    entity_type: EntityType
    address: Optional[str]
    phone: Optional[str]
    pending_tax_id: bool
    created_at: datetime
