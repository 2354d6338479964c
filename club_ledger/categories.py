"""
Category lookup table.

Every piece of per-category behaviour (which member column
holds the balance, which transaction column holds the snapshot,
how values are denominated and rendered) lives in CATEGORY_SPECS.
Services dispatch through this table instead of branching on
individual categories.
"""

from dataclasses import dataclass
from decimal import Decimal

from club_ledger.models.enums import AdjustType, Category, ValueKind


@dataclass(frozen=True)
class CategorySpec:
    category: Category
    label: str
    kind: ValueKind
    balance_field: str
    snapshot_field: str
    increase_label: str
    decrease_label: str

    @property
    def magnitude_field(self) -> str:
        """Transaction column holding the magnitude for this category."""
        return "amount" if self.kind == ValueKind.CURRENCY else "minutes"

    @property
    def amount_header(self) -> str:
        return "金額" if self.kind == ValueKind.CURRENCY else "分鐘"

    def zero(self):
        return Decimal("0") if self.kind == ValueKind.CURRENCY else 0

    def coerce(self, value):
        """Normalise a stored or requested value; None reads as zero."""
        if value is None:
            return self.zero()
        if self.kind == ValueKind.CURRENCY:
            return value if isinstance(value, Decimal) else Decimal(str(value))
        return int(value)

    # --- Accessors over Member and Transaction rows ---

    def balance_of(self, member):
        return self.coerce(getattr(member, self.balance_field))

    def set_balance(self, member, value) -> None:
        setattr(member, self.balance_field, self.coerce(value))

    def snapshot_of(self, transaction):
        """Snapshot stored on a transaction, or None for legacy rows."""
        value = getattr(transaction, self.snapshot_field)
        return None if value is None else self.coerce(value)

    def set_snapshot(self, transaction, value) -> None:
        setattr(transaction, self.snapshot_field, self.coerce(value))

    def direction_label(self, adjust_type: AdjustType) -> str:
        if adjust_type == AdjustType.INCREASE:
            return self.increase_label
        return self.decrease_label

    def format_value(self, value, signed: bool = False) -> str:
        """
        Render a value with its unit: $1,000 for money, 120分 for time.

        With signed=True positive values get an explicit "+".
        """
        value = self.coerce(value)
        if value < 0:
            sign = "-"
        elif signed and value > 0:
            sign = "+"
        else:
            sign = ""
        magnitude = abs(value)
        if self.kind == ValueKind.CURRENCY:
            return f"{sign}${_format_money(magnitude)}"
        return f"{sign}{magnitude}分"


def _format_money(value: Decimal) -> str:
    if value == value.to_integral_value():
        return f"{int(value):,}"
    return f"{value.normalize():,f}"


_MONEY_LABELS = {"increase_label": "儲值", "decrease_label": "扣款"}
_TIME_LABELS = {"increase_label": "增加", "decrease_label": "使用"}


CATEGORY_SPECS: dict[Category, CategorySpec] = {
    Category.CASH: CategorySpec(
        category=Category.CASH,
        label="儲值",
        kind=ValueKind.CURRENCY,
        balance_field="balance",
        snapshot_field="balance_after",
        **_MONEY_LABELS,
    ),
    Category.VIP_VOUCHER: CategorySpec(
        category=Category.VIP_VOUCHER,
        label="VIP票券",
        kind=ValueKind.CURRENCY,
        balance_field="vip_voucher_amount",
        snapshot_field="vip_voucher_amount_after",
        **_MONEY_LABELS,
    ),
    Category.DESIGNATED_LESSON: CategorySpec(
        category=Category.DESIGNATED_LESSON,
        label="指定課",
        kind=ValueKind.MINUTES,
        balance_field="designated_lesson_minutes",
        snapshot_field="designated_lesson_minutes_after",
        **_TIME_LABELS,
    ),
    Category.BOAT_VOUCHER_G23: CategorySpec(
        category=Category.BOAT_VOUCHER_G23,
        label="G23船券",
        kind=ValueKind.MINUTES,
        balance_field="boat_voucher_g23_minutes",
        snapshot_field="boat_voucher_g23_minutes_after",
        **_TIME_LABELS,
    ),
    Category.BOAT_VOUCHER_G21_PANTHER: CategorySpec(
        category=Category.BOAT_VOUCHER_G21_PANTHER,
        label="G21/黑豹船券",
        kind=ValueKind.MINUTES,
        balance_field="boat_voucher_g21_panther_minutes",
        snapshot_field="boat_voucher_g21_panther_minutes_after",
        **_TIME_LABELS,
    ),
    Category.GIFT_BOAT: CategorySpec(
        category=Category.GIFT_BOAT,
        label="贈送大船",
        kind=ValueKind.MINUTES,
        balance_field="gift_boat_hours",
        snapshot_field="gift_boat_hours_after",
        **_TIME_LABELS,
    ),
}

assert set(CATEGORY_SPECS) == set(Category), "every category needs a spec"


def get_spec(category: Category) -> CategorySpec:
    return CATEGORY_SPECS[Category(category)]
