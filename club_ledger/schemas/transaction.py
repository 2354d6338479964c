"""
Pydantic schemas for ledger adjustments.

Business rules (positive magnitude, non-blank description,
date present) are checked by the LedgerService so that direct
service callers get the same ValidationError as API clients.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from club_ledger.models.enums import AdjustType, Category


class AdjustmentCreate(BaseModel):
    category: Category
    adjust_type: AdjustType
    magnitude: Decimal
    transaction_date: date | None = None
    description: str = Field(default="", max_length=255)
    notes: str | None = None


class AdjustmentUpdate(AdjustmentCreate):
    """Full replacement of an adjustment's editable fields."""


class TransactionResponse(BaseModel):
    id: int
    member_id: int
    category: Category
    adjust_type: AdjustType
    amount: Decimal | None
    minutes: int | None
    magnitude: Decimal
    transaction_date: date
    description: str
    notes: str | None
    created_at: datetime
    balance_after: Decimal | None
    vip_voucher_amount_after: Decimal | None
    designated_lesson_minutes_after: int | None
    boat_voucher_g23_minutes_after: int | None
    boat_voucher_g21_panther_minutes_after: int | None
    gift_boat_hours_after: int | None

    model_config = {"from_attributes": True}


class AdjustmentResponse(BaseModel):
    """Result of a record or edit: the row plus the balances it touched."""
    transaction: TransactionResponse
    balances: dict[Category, Decimal]
    negative_categories: list[Category]

    model_config = {"from_attributes": True}
