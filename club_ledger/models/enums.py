"""
Shared enumerations for database models.

Python enums mapped to database enums mean an unknown
category or direction is rejected by the database as well
as by Python validation.
"""

import enum


class Category(str, enum.Enum):
    """The six independent credit types tracked per member."""
    CASH = "balance"
    VIP_VOUCHER = "vip_voucher"
    DESIGNATED_LESSON = "designated_lesson"
    BOAT_VOUCHER_G23 = "boat_voucher_g23"
    BOAT_VOUCHER_G21_PANTHER = "boat_voucher_g21_panther"
    GIFT_BOAT = "gift_boat"


class AdjustType(str, enum.Enum):
    """Declared sign of an adjustment."""
    INCREASE = "increase"
    DECREASE = "decrease"


class ValueKind(str, enum.Enum):
    """How a category's balance is denominated."""
    CURRENCY = "currency"
    MINUTES = "minutes"
