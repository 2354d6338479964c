"""
Opening balance model.

Records the value a category held when the member's ledger
started, for accounts that predate ledger tracking. Written
once at member creation and never modified. A missing row
means the category started at zero.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime, Numeric, ForeignKey, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from club_ledger.models.base import Base
from club_ledger.models.enums import Category


class OpeningBalance(Base):
    __tablename__ = "opening_balances"
    __table_args__ = (
        UniqueConstraint("member_id", "category", name="uq_opening_balance"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
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
    # Minute categories are stored whole; Numeric covers both kinds.
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    member: Mapped["Member"] = relationship(back_populates="opening_balances")

    def __repr__(self) -> str:
        return f"<OpeningBalance {self.member_id} {self.category.value}={self.value}>"
