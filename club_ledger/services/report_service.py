"""
Report service: period reconciliation per member and category.

Reports are built from the ledger alone. The opening balance
of a window is the snapshot of the last transaction before it,
and the closing balance is the snapshot of the last transaction
inside it. The member's current balance is never consulted,
since it reflects activity outside the window.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from club_ledger.categories import CATEGORY_SPECS, CategorySpec, get_spec
from club_ledger.errors import StorageError, ValidationError
from club_ledger.models.enums import AdjustType, Category
from club_ledger.models.member import Member
from club_ledger.models.transaction import Transaction
from club_ledger.services.ledger_service import ascending_order, descending_order
from club_ledger.services.member_service import MemberService

logger = logging.getLogger(__name__)


@dataclass
class Reconciliation:
    category: Category
    start_date: date
    end_date: date
    opening_balance: object
    closing_balance: object
    total_increase: object
    total_decrease: object
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """No balance at either end and no activity in between."""
        return (
            self.opening_balance == 0
            and self.closing_balance == 0
            and not self.transactions
        )


def month_window(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    if not date.min.year <= year <= date.max.year:
        raise ValidationError(f"Invalid year: {year}")
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class ReportService:

    def __init__(self, db: Session):
        self.db = db
        self.member_service = MemberService(db)

    def _category_query(self, member: Member, spec: CategorySpec):
        return select(Transaction).where(
            Transaction.member_id == member.id,
            Transaction.category == spec.category,
        )

    def _balance_after(self, member: Member, spec: CategorySpec, txn: Transaction):
        """
        Balance of the category right after txn.

        Uses the stored snapshot. Legacy rows without one are
        replayed from the seed through txn in ledger order.
        """
        snapshot = spec.snapshot_of(txn)
        if snapshot is not None:
            return snapshot

        logger.debug("Transaction %s has no snapshot, replaying history", txn.id)
        balance = self.member_service.get_seed(member.id, spec.category)
        rows = self.db.execute(
            self._category_query(member, spec).order_by(*ascending_order())
        ).scalars().all()
        for row in rows:
            balance += row.signed_delta
            if row.id == txn.id:
                break
        return spec.coerce(balance)

    def reconcile(
        self,
        member: Member,
        category: Category,
        start_date: date,
        end_date: date,
    ) -> Reconciliation:
        """
        Opening and closing balance plus activity totals for one
        category over [start_date, end_date], both ends inclusive.
        """
        if start_date is None or end_date is None:
            raise ValidationError("start_date and end_date are required")
        if start_date > end_date:
            raise ValidationError(
                f"start_date {start_date} is after end_date {end_date}"
            )
        spec = get_spec(category)

        try:
            prior = self.db.execute(
                self._category_query(member, spec)
                .where(Transaction.transaction_date < start_date)
                .order_by(*descending_order())
                .limit(1)
            ).scalar_one_or_none()

            rows = list(self.db.execute(
                self._category_query(member, spec)
                .where(
                    Transaction.transaction_date >= start_date,
                    Transaction.transaction_date <= end_date,
                )
                .order_by(*ascending_order())
            ).scalars().all())

            if prior is not None:
                opening = self._balance_after(member, spec, prior)
            else:
                opening = self.member_service.get_seed(member.id, spec.category)

            if rows:
                closing = self._balance_after(member, spec, rows[-1])
            else:
                closing = opening
        except SQLAlchemyError as e:
            logger.error("Reconciliation query failed: %s", e)
            raise StorageError(str(e)) from e

        total_increase = spec.zero()
        total_decrease = spec.zero()
        for txn in rows:
            if txn.adjust_type == AdjustType.INCREASE:
                total_increase += txn.magnitude
            else:
                total_decrease += txn.magnitude

        return Reconciliation(
            category=spec.category,
            start_date=start_date,
            end_date=end_date,
            opening_balance=opening,
            closing_balance=closing,
            total_increase=spec.coerce(total_increase),
            total_decrease=spec.coerce(total_decrease),
            transactions=rows,
        )

    def reconcile_month(
        self, member: Member, category: Category, year: int, month: int
    ) -> Reconciliation:
        start_date, end_date = month_window(year, month)
        return self.reconcile(member, category, start_date, end_date)

    def monthly_statement(
        self,
        member: Member,
        year: int,
        month: int,
        categories: list[Category] | None = None,
    ) -> list[Reconciliation]:
        """One reconciliation per category, in category order."""
        if categories is None:
            categories = list(CATEGORY_SPECS)
        return [
            self.reconcile_month(member, category, year, month)
            for category in categories
        ]
