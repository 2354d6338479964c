"""
Audit log model.

Records every ledger mutation so the history of a balance can
be traced even after a transaction row is edited or deleted.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from club_ledger.models.base import Base


class AuditLog(Base):
    """
    Immutable record of a ledger event.

    Audit rows are append-only. transaction_id is kept as a
    plain column rather than a foreign key so that rows about
    deleted transactions survive.
    """

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    member_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True, index=True
    )
    transaction_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
