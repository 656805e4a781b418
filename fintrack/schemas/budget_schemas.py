from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional


class BudgetCreate(BaseModel):
    """Schema for creating a monthly category budget"""

    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    category_id: int = Field(..., gt=0)
    subcategory_id: Optional[int] = Field(None, gt=0)
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    rollover_in: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    carry_over: bool = Field(
        default=False,
        description="Use the previous month's unspent amount as rollover_in",
    )
    description: Optional[str] = Field(None, max_length=1000)


class BudgetUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    rollover_in: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=1000)


class BudgetResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    year: int
    month: int
    category_id: int
    subcategory_id: Optional[int]
    amount: float
    rollover_in: float
    description: Optional[str]
    created_at: datetime
    updated_at: datetime


class BudgetStatusResponse(BaseModel):
    """Spent/remaining for one category and month"""

    model_config = {"from_attributes": True}

    category_id: int
    year: int
    month: int
    allocated: float
    rollover_in: float
    spent: float
    remaining: float
    percentage: float
    display_percentage: float
