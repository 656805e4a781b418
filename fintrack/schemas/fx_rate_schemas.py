import datetime as dt
from decimal import Decimal
from pydantic import BaseModel, Field


class FxRateCreate(BaseModel):
    """Tenant-maintained rate: base-currency units per one unit of `code`"""

    code: str = Field(..., min_length=3, max_length=3)
    date: dt.date
    rate: Decimal = Field(..., gt=0)


class FxRateResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    code: str
    date: dt.date
    rate: float
