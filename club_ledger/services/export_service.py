"""
Export service: renders ledger reports as CSV documents.

Documents start with a UTF-8 byte-order mark so spreadsheet
applications pick the right encoding. Fields are quoted only
when they contain the delimiter, a quote or a line break.
"""

import csv
import io
import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from club_ledger.categories import CATEGORY_SPECS, get_spec
from club_ledger.config import get_settings
from club_ledger.errors import StorageError, ValidationError
from club_ledger.models.enums import AdjustType, Category
from club_ledger.models.member import Member
from club_ledger.models.transaction import Transaction
from club_ledger.services.ledger_service import descending_order
from club_ledger.services.report_service import ReportService

logger = logging.getLogger(__name__)

BOM = "\ufeff"

GENERAL_LEDGER_HEADER = [
    "會員", "日期", "項目", "操作", "變動", "交易後餘額", "說明", "備註",
]

BALANCE_SUMMARY_HEADER = [
    "姓名", "暱稱", "儲值", "VIP票券", "指定課時數",
    "G23船券", "G21/黑豹船券", "贈送大船時數",
]


def to_bytes(document: str) -> bytes:
    return document.encode("utf-8")


def _writer(buffer: io.StringIO):
    return csv.writer(buffer, lineterminator="\n")


def _plain(value) -> str:
    """Bare number for spreadsheet cells: 500 rather than 500.00."""
    if value == int(value):
        return str(int(value))
    return str(value)


class ExportService:

    def __init__(self, db: Session):
        self.db = db
        self.report_service = ReportService(db)
        self.date_format = get_settings().EXPORT_DATE_FORMAT

    def export_member_month(
        self,
        member: Member,
        year: int,
        month: int,
        categories: list[Category] | None = None,
    ) -> str:
        """
        Monthly statement for one member.

        One block per category with activity or a balance: a
        summary line with opening and closing balance, then the
        month's transactions oldest first. Categories that were
        zero throughout with no transactions are left out.
        """
        statement = self.report_service.monthly_statement(
            member, year, month, categories
        )

        blocks = []
        for rec in statement:
            if rec.is_empty:
                continue
            spec = get_spec(rec.category)
            buffer = io.StringIO()
            writer = _writer(buffer)
            writer.writerow([
                f"【{spec.label}】{spec.format_value(rec.opening_balance)}"
                f" → {spec.format_value(rec.closing_balance)}"
            ])
            if rec.transactions:
                writer.writerow(["日期", "說明", "動作", spec.amount_header, "備註"])
                for txn in rec.transactions:
                    writer.writerow([
                        txn.transaction_date.strftime(self.date_format),
                        txn.description,
                        spec.direction_label(txn.adjust_type),
                        spec.format_value(txn.magnitude),
                        txn.notes or "",
                    ])
            blocks.append(buffer.getvalue())

        logger.info(
            "Exported %d-%02d statement for member %s (%d categories)",
            year, month, member.id, len(blocks),
        )
        return BOM + "\n".join(blocks)

    def export_general_ledger(self, start_date: date, end_date: date) -> str:
        """Every member's transactions in the window, newest first."""
        if start_date > end_date:
            raise ValidationError(
                f"start_date {start_date} is after end_date {end_date}"
            )

        try:
            rows = self.db.execute(
                select(Transaction, Member)
                .join(Member, Transaction.member_id == Member.id)
                .where(
                    Transaction.transaction_date >= start_date,
                    Transaction.transaction_date <= end_date,
                )
                .order_by(*descending_order())
            ).all()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

        buffer = io.StringIO()
        writer = _writer(buffer)
        writer.writerow(GENERAL_LEDGER_HEADER)
        for txn, member in rows:
            spec = get_spec(txn.category)
            snapshot = spec.snapshot_of(txn)
            writer.writerow([
                member.display_name,
                txn.transaction_date.isoformat(),
                spec.label,
                "增加" if txn.adjust_type == AdjustType.INCREASE else "減少",
                spec.format_value(txn.signed_delta, signed=True),
                spec.format_value(snapshot) if snapshot is not None else "",
                txn.description,
                txn.notes or "",
            ])

        logger.info(
            "Exported general ledger %s..%s (%d rows)",
            start_date, end_date, len(rows),
        )
        return BOM + buffer.getvalue()

    def export_balance_summary(self) -> str:
        """Current balances of every member, ordered by name."""
        try:
            members = self.db.execute(
                select(Member).order_by(Member.name, Member.id)
            ).scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

        buffer = io.StringIO()
        writer = _writer(buffer)
        writer.writerow(BALANCE_SUMMARY_HEADER)
        for member in members:
            writer.writerow(
                [member.name, member.nickname or ""]
                + [_plain(spec.balance_of(member)) for spec in CATEGORY_SPECS.values()]
            )
        return BOM + buffer.getvalue()
