"""
Member account model.

Holds the six current balances for a member. These columns
are a materialized view of the transaction ledger: they are
changed only by the LedgerService, never written directly.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Integer, Numeric, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from club_ledger.models.base import Base


class Member(Base):
    __tablename__ = "members"

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    nickname: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Balances. NULL reads as zero.
    balance: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True, default=Decimal("0")
    )
    vip_voucher_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True, default=Decimal("0")
    )
    designated_lesson_minutes: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0
    )
    boat_voucher_g23_minutes: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0
    )
    boat_voucher_g21_panther_minutes: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0
    )
    gift_boat_hours: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="member"
    )
    opening_balances: Mapped[list["OpeningBalance"]] = relationship(
        back_populates="member"
    )

    @property
    def display_name(self) -> str:
        return self.nickname or self.name

    def __repr__(self) -> str:
        return f"<Member {self.id} {self.name}>"
