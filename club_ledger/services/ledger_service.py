"""
Ledger service: the only writer of member balances.

This service enforces the fundamental rule of the ledger:
for every member and category,

    stored balance == seed + sum of signed deltas of live transactions

Recording, editing and deleting an adjustment each apply a
compensating delta to the member balance and write the
matching change to the transaction row. The service flushes
but never commits; the caller commits once after the call
returns, so the balance write and the ledger write land
together or not at all.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from club_ledger.categories import CATEGORY_SPECS, CategorySpec, get_spec
from club_ledger.errors import NotFoundError, StorageError, ValidationError
from club_ledger.models.audit_log import AuditLog
from club_ledger.models.enums import AdjustType, Category, ValueKind
from club_ledger.models.member import Member
from club_ledger.models.transaction import Transaction
from club_ledger.schemas.transaction import AdjustmentCreate, AdjustmentUpdate
from club_ledger.services.member_service import MemberService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass
class AdjustmentResult:
    """A written transaction and the new balances of the categories it touched."""
    transaction: Transaction
    balances: dict[Category, object] = field(default_factory=dict)

    @property
    def negative_categories(self) -> list[Category]:
        return [c for c, value in self.balances.items() if value < 0]


@dataclass
class BalanceDrift:
    category: Category
    stored: object
    expected: object


def signed_delta(adjust_type: AdjustType, magnitude):
    """Signed effect of an adjustment. The sign comes from adjust_type only."""
    magnitude = abs(magnitude)
    return magnitude if adjust_type == AdjustType.INCREASE else -magnitude


def ascending_order():
    return (
        Transaction.transaction_date.asc(),
        Transaction.created_at.asc(),
        Transaction.id.asc(),
    )


def descending_order():
    return (
        Transaction.transaction_date.desc(),
        Transaction.created_at.desc(),
        Transaction.id.desc(),
    )


class LedgerService:
    """
    Record, edit and delete balance adjustments.

    The service takes a database session as a constructor
    argument, so the caller controls the transaction boundary.
    """

    def __init__(self, db: Session):
        self.db = db
        self.member_service = MemberService(db)

    # --- Validation ---

    def _validate(self, request: AdjustmentCreate) -> tuple[CategorySpec, object]:
        """
        Check an adjustment request and return its category spec
        and normalised magnitude. Nothing has been written yet when
        this raises.
        """
        try:
            spec = get_spec(request.category)
        except ValueError:
            raise ValidationError(
                f"Invalid category: {request.category!r}"
            ) from None

        if request.magnitude is None or request.magnitude <= 0:
            raise ValidationError("magnitude must be positive")
        if (
            spec.kind == ValueKind.MINUTES
            and request.magnitude != int(request.magnitude)
        ):
            raise ValidationError(
                f"{spec.label} is counted in whole minutes, "
                f"got {request.magnitude}"
            )
        if spec.kind == ValueKind.CURRENCY:
            # Balances and snapshots are stored as Numeric(12, 2)
            amount = spec.coerce(request.magnitude)
            if amount != amount.quantize(CENT):
                raise ValidationError(
                    f"{spec.label} allows at most two decimal places, "
                    f"got {request.magnitude}"
                )
        if not request.description or not request.description.strip():
            raise ValidationError("description is required")
        if request.transaction_date is None:
            raise ValidationError("transaction_date is required")

        return spec, spec.coerce(request.magnitude)

    # --- Helpers ---

    def _flush(self) -> None:
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error("Ledger write failed: %s", e)
            raise StorageError(str(e)) from e

    def _audit(self, event_type: str, member_id: int, transaction_id, **details) -> None:
        self.db.add(AuditLog(
            event_type=event_type,
            member_id=member_id,
            transaction_id=transaction_id,
            details=json.dumps(details, default=str, ensure_ascii=False),
        ))

    def _get_live_transaction(self, transaction_id: int) -> Transaction:
        txn = self.db.get(Transaction, transaction_id)
        if not txn:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return txn

    @staticmethod
    def _apply(spec: CategorySpec, member: Member, delta):
        new_balance = spec.balance_of(member) + delta
        spec.set_balance(member, new_balance)
        return spec.balance_of(member)

    @staticmethod
    def _write_magnitude(spec: CategorySpec, txn: Transaction, magnitude) -> None:
        if spec.kind == ValueKind.CURRENCY:
            txn.amount = magnitude
            txn.minutes = None
        else:
            txn.minutes = magnitude
            txn.amount = None

    # --- Mutations ---

    def record_adjustment(
        self, member: Member, request: AdjustmentCreate
    ) -> AdjustmentResult:
        """
        Apply a new signed adjustment to one category of a member.

        The member balance is updated first, then a transaction is
        appended whose snapshots hold the member's balances after
        the update.
        """
        spec, magnitude = self._validate(request)
        delta = signed_delta(request.adjust_type, magnitude)

        new_balance = self._apply(spec, member, delta)
        self._flush()

        txn = Transaction(
            member_id=member.id,
            category=spec.category,
            adjust_type=request.adjust_type,
            transaction_date=request.transaction_date,
            description=request.description.strip(),
            notes=request.notes,
        )
        self._write_magnitude(spec, txn, magnitude)
        for other in CATEGORY_SPECS.values():
            other.set_snapshot(txn, other.balance_of(member))
        self.db.add(txn)
        self._flush()

        self._audit(
            "transaction.created", member.id, txn.id,
            category=spec.category.value, delta=delta, balance=new_balance,
        )
        self._flush()

        logger.info(
            "Recorded %s %s on member %s: delta=%s balance=%s",
            spec.category.value, txn.id, member.id, delta, new_balance,
        )
        result = AdjustmentResult(txn, {spec.category: new_balance})
        self._warn_negative(member, result)
        return result

    def edit_adjustment(
        self, transaction_id: int, request: AdjustmentUpdate
    ) -> AdjustmentResult:
        """
        Rewrite an existing adjustment in place.

        The old effect is derived from the stored direction applied
        to the absolute stored magnitude and reversed; the new
        effect is then applied. When the category changes, the old
        category is reversed and the new one applied independently.
        Only the snapshot of the category now in effect is refreshed.
        """
        txn = self._get_live_transaction(transaction_id)
        new_spec, new_magnitude = self._validate(request)
        old_spec = get_spec(txn.category)
        member = self.member_service.get_member(txn.member_id)

        old_delta = signed_delta(txn.adjust_type, txn.magnitude)
        new_delta = signed_delta(request.adjust_type, new_magnitude)

        balances = {}
        if new_spec.category == old_spec.category:
            balances[new_spec.category] = self._apply(
                new_spec, member, new_delta - old_delta
            )
        else:
            balances[old_spec.category] = self._apply(old_spec, member, -old_delta)
            balances[new_spec.category] = self._apply(new_spec, member, new_delta)
        self._flush()

        txn.category = new_spec.category
        txn.adjust_type = request.adjust_type
        self._write_magnitude(new_spec, txn, new_magnitude)
        txn.transaction_date = request.transaction_date
        txn.description = request.description.strip()
        txn.notes = request.notes
        new_spec.set_snapshot(txn, balances[new_spec.category])
        self._flush()

        self._audit(
            "transaction.updated", member.id, txn.id,
            old_category=old_spec.category.value, old_delta=old_delta,
            new_category=new_spec.category.value, new_delta=new_delta,
            balances={c.value: v for c, v in balances.items()},
        )
        self._flush()

        logger.info(
            "Edited transaction %s on member %s: %s %s -> %s %s",
            txn.id, member.id, old_spec.category.value, old_delta,
            new_spec.category.value, new_delta,
        )
        result = AdjustmentResult(txn, balances)
        self._warn_negative(member, result)
        return result

    def delete_adjustment(self, transaction_id: int) -> None:
        """
        Remove an adjustment and reverse exactly what it contributed.

        There is no undo; restoring means recording a new adjustment.
        """
        txn = self._get_live_transaction(transaction_id)
        spec = get_spec(txn.category)
        member = self.member_service.get_member(txn.member_id)
        delta = txn.signed_delta

        new_balance = self._apply(spec, member, -delta)
        self._flush()

        self.db.delete(txn)
        self._flush()

        self._audit(
            "transaction.deleted", member.id, transaction_id,
            category=spec.category.value, reversed_delta=delta,
            balance=new_balance,
        )
        self._flush()

        logger.info(
            "Deleted transaction %s on member %s: reversed %s, %s balance=%s",
            transaction_id, member.id, delta, spec.category.value, new_balance,
        )

    def _warn_negative(self, member: Member, result: AdjustmentResult) -> None:
        for category in result.negative_categories:
            logger.warning(
                "Member %s %s balance is negative: %s",
                member.id, category.value, result.balances[category],
            )

    # --- Reads ---

    def get_transaction(self, transaction_id: int) -> Transaction:
        return self._get_live_transaction(transaction_id)

    def list_transactions(
        self,
        member_id: int,
        category: Category | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Transaction]:
        """Live transactions for a member, newest first."""
        query = select(Transaction).where(Transaction.member_id == member_id)
        if category is not None:
            query = query.where(Transaction.category == Category(category))
        if start_date is not None:
            query = query.where(Transaction.transaction_date >= start_date)
        if end_date is not None:
            query = query.where(Transaction.transaction_date <= end_date)

        try:
            rows = self.db.execute(
                query.order_by(*descending_order())
            ).scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        return list(rows)

    # --- Consistency ---

    def recompute_from_history(self, member: Member, category: Category):
        """
        Balance the category should hold: its seed plus the signed
        deltas of every live transaction, replayed in date order.
        """
        spec = get_spec(category)
        balance = self.member_service.get_seed(member.id, spec.category)
        rows = self.db.execute(
            select(Transaction)
            .where(
                Transaction.member_id == member.id,
                Transaction.category == spec.category,
            )
            .order_by(*ascending_order())
        ).scalars().all()
        for txn in rows:
            balance += txn.signed_delta
        return spec.coerce(balance)

    def find_drift(self, member: Member) -> dict[Category, BalanceDrift]:
        """Categories whose stored balance disagrees with the ledger."""
        drift = {}
        for category, spec in CATEGORY_SPECS.items():
            stored = spec.balance_of(member)
            expected = self.recompute_from_history(member, category)
            if stored != expected:
                logger.warning(
                    "Balance drift on member %s %s: stored=%s expected=%s",
                    member.id, category.value, stored, expected,
                )
                drift[category] = BalanceDrift(category, stored, expected)
        return drift

    def repair_balance(self, member: Member, category: Category):
        """Overwrite a stored balance with the value replayed from history."""
        spec = get_spec(category)
        stored = spec.balance_of(member)
        expected = self.recompute_from_history(member, spec.category)
        spec.set_balance(member, expected)
        self._audit(
            "balance.repaired", member.id, None,
            category=spec.category.value, stored=stored, expected=expected,
        )
        self._flush()
        logger.info(
            "Repaired member %s %s balance: %s -> %s",
            member.id, spec.category.value, stored, expected,
        )
        return expected
