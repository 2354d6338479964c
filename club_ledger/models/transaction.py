"""
Transaction model.

One signed adjustment to one member balance category. The
sign lives in adjust_type; amount/minutes hold the magnitude.
Historical rows were written with inconsistent signs on the
numeric columns, so the numeric sign is never trusted: the
magnitude is always read through abs().

Each row also stores post-adjustment snapshots. Only the
snapshot of the row's own category is authoritative; the
other five are carried forward for reporting convenience.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Text, Date, DateTime, Integer, Numeric, ForeignKey, Index,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from club_ledger.models.base import Base
from club_ledger.models.enums import AdjustType, Category


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        Index(
            "ix_transactions_member_category_date",
            "member_id", "category", "transaction_date",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id"), nullable=False, index=True
    )
    category: Mapped[Category] = mapped_column(
        SAEnum(
            Category,
            name="category_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    adjust_type: Mapped[AdjustType] = mapped_column(
        SAEnum(
            AdjustType,
            name="adjust_type_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    # The category decides which of amount/minutes is the magnitude.
    amount: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    # Post-adjustment snapshots, one per category
    balance_after: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    vip_voucher_amount_after: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    designated_lesson_minutes_after: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    boat_voucher_g23_minutes_after: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    boat_voucher_g21_panther_minutes_after: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    gift_boat_hours_after: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )

    member: Mapped["Member"] = relationship(back_populates="transactions")

    @property
    def magnitude(self):
        """
        Absolute size of the adjustment, whatever sign was stored.

        Read from the column that belongs to the category. Legacy
        purchase rows on time categories also carry a price in
        amount, which is not part of the minute balance.
        """
        # Imported here: club_ledger.categories imports this package
        from club_ledger.categories import get_spec

        spec = get_spec(self.category)
        value = getattr(self, spec.magnitude_field)
        return abs(value) if value is not None else spec.zero()

    @property
    def signed_delta(self):
        if self.adjust_type == AdjustType.INCREASE:
            return self.magnitude
        return -self.magnitude

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.id} {self.category.value} "
            f"{self.adjust_type.value} {self.magnitude}>"
        )
