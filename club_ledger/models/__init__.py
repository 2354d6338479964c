"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from club_ledger.models.base import Base
from club_ledger.models.enums import (
    Category,
    AdjustType,
    ValueKind,
)
from club_ledger.models.audit_log import AuditLog
from club_ledger.models.member import Member
from club_ledger.models.opening_balance import OpeningBalance
from club_ledger.models.transaction import Transaction

__all__ = [
    "Base",
    "Category",
    "AdjustType",
    "ValueKind",
    "AuditLog",
    "Member",
    "OpeningBalance",
    "Transaction",
]
