"""
Pydantic schemas for member accounts.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from club_ledger.models.enums import Category


class MemberCreate(BaseModel):
    """
    Request to create a member account.

    The balance fields are seed values: what each category held
    before the member's ledger started. Most accounts start at zero.
    """
    name: str = Field(min_length=1, max_length=100)
    nickname: str | None = Field(default=None, max_length=100)
    balance: Decimal = Decimal("0")
    vip_voucher_amount: Decimal = Decimal("0")
    designated_lesson_minutes: int = 0
    boat_voucher_g23_minutes: int = 0
    boat_voucher_g21_panther_minutes: int = 0
    gift_boat_hours: int = 0


class MemberResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    name: str
    nickname: str | None
    balance: Decimal | None
    vip_voucher_amount: Decimal | None
    designated_lesson_minutes: int | None
    boat_voucher_g23_minutes: int | None
    boat_voucher_g21_panther_minutes: int | None
    gift_boat_hours: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class BalanceDriftResponse(BaseModel):
    """A category whose stored balance disagrees with its history."""
    category: Category
    stored: Decimal
    expected: Decimal

    model_config = {"from_attributes": True}


class BalanceRepairResponse(BaseModel):
    member_id: int
    category: Category
    balance: Decimal
