import datetime as dt
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional

from fintrack.models.entity import EntityType
from fintrack.models.posting import (
    PaymentMethod,
    PostingSource,
    PostingStatus,
    IncomeCategory,
)


class LedgerEntryBase(BaseModel):
    """Fields shared by every user-entered transaction"""

    date: dt.date
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str = Field(default="ARS", min_length=3, max_length=3)
    entity_name: Optional[str] = Field(None, max_length=255)
    entity_tax_id: Optional[str] = Field(None, max_length=20, description="11-digit tax id")
    entity_type: EntityType = EntityType.MERCHANT
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: Optional[str] = Field(None, max_length=1000)
    source: PostingSource = PostingSource.MANUAL
    is_recurring: bool = False
    fingerprint: Optional[str] = Field(
        None, max_length=128, description="Receipt dedup key (OCR entries)"
    )


class ExpenseCreate(LedgerEntryBase):
    """Schema for recording an expense, optionally split in installments"""

    category_id: int = Field(..., gt=0)
    subcategory_id: Optional[int] = Field(None, gt=0)
    installments: int = Field(default=1, ge=1, le=60)
    card_type: Optional[str] = Field(None, max_length=50)


class IncomeCreate(LedgerEntryBase):
    """Schema for recording an income"""

    category: IncomeCategory = IncomeCategory.OTHER
    description: Optional[str] = Field(None, max_length=1000)


class ExpenseUpdate(BaseModel):
    """Descriptive fields that may change after posting; amounts and dates may not"""

    category_id: Optional[int] = Field(None, gt=0)
    subcategory_id: Optional[int] = Field(None, gt=0)
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = Field(None, max_length=1000)


class PostingResponseBase(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    tenant_id: int
    user_id: int
    date: dt.date
    amount: float
    currency: str
    base_amount: float
    entity_id: Optional[int]
    entity_tax_id: Optional[str]
    entity_name: Optional[str]
    payment_method: PaymentMethod
    notes: Optional[str]
    source: PostingSource
    status: PostingStatus
    is_recurring: bool
    deleted: bool
    installments: Optional[int]
    installment_number: Optional[int]
    card_type: Optional[str]
    created_at: dt.datetime
    updated_at: dt.datetime


class ExpenseResponse(PostingResponseBase):
    category_id: int
    subcategory_id: Optional[int]


class IncomeResponse(PostingResponseBase):
    category: IncomeCategory
    description: Optional[str]


class ExpenseListResponse(BaseModel):
    expenses: list[ExpenseResponse]
    total: int


class IncomeListResponse(BaseModel):
    incomes: list[IncomeResponse]
    total: int


class RecordResponse(BaseModel):
    """Result of recording one entry: one ID per installment posting"""

    posting_ids: list[int]
    count: int
    audit_failures: int = 0
