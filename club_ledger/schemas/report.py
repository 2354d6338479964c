"""
Pydantic schemas for period reconciliation.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from club_ledger.models.enums import Category
from club_ledger.schemas.transaction import TransactionResponse


class ReconciliationResponse(BaseModel):
    category: Category
    start_date: date
    end_date: date
    opening_balance: Decimal
    closing_balance: Decimal
    total_increase: Decimal
    total_decrease: Decimal
    transactions: list[TransactionResponse]

    model_config = {"from_attributes": True}
