"""
Tests for period reconciliation.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from club_ledger.errors import StorageError, ValidationError
from club_ledger.models.enums import AdjustType, Category
from club_ledger.services.ledger_service import LedgerService
from club_ledger.services.report_service import ReportService, month_window


def record(db_session, member, adjustment, **kwargs):
    txn = LedgerService(db_session).record_adjustment(
        member, adjustment(**kwargs)
    ).transaction
    db_session.commit()
    return txn


class TestReconcile:

    def test_window_with_activity(self, db_session, make_member, adjustment):
        member = make_member()
        record(db_session, member, adjustment,
               magnitude=Decimal("300"), transaction_date=date(2025, 1, 5))
        record(db_session, member, adjustment,
               adjust_type=AdjustType.DECREASE, magnitude=Decimal("100"),
               transaction_date=date(2025, 1, 20))

        rec = ReportService(db_session).reconcile(
            member, Category.CASH, date(2025, 1, 1), date(2025, 1, 31)
        )

        assert rec.opening_balance == Decimal("0")
        assert rec.closing_balance == Decimal("200")
        assert rec.total_increase == Decimal("300")
        assert rec.total_decrease == Decimal("100")
        assert [t.transaction_date for t in rec.transactions] == [
            date(2025, 1, 5), date(2025, 1, 20),
        ]

    def test_opening_from_prior_snapshot(
        self, db_session, make_member, adjustment
    ):
        member = make_member()
        record(db_session, member, adjustment,
               category=Category.DESIGNATED_LESSON, magnitude=Decimal("120"),
               transaction_date=date(2024, 12, 28))
        record(db_session, member, adjustment,
               category=Category.DESIGNATED_LESSON,
               adjust_type=AdjustType.DECREASE, magnitude=Decimal("30"),
               transaction_date=date(2025, 1, 10))

        rec = ReportService(db_session).reconcile(
            member, Category.DESIGNATED_LESSON,
            date(2025, 1, 1), date(2025, 1, 31),
        )

        assert rec.opening_balance == 120
        assert rec.closing_balance == 90
        assert rec.total_increase == 0
        assert rec.total_decrease == 30

    def test_empty_window_closes_at_opening(
        self, db_session, make_member, adjustment
    ):
        member = make_member()
        record(db_session, member, adjustment,
               magnitude=Decimal("500"), transaction_date=date(2025, 1, 5))
        # Activity after the window must not leak into its closing balance
        record(db_session, member, adjustment,
               magnitude=Decimal("700"), transaction_date=date(2025, 3, 5))

        rec = ReportService(db_session).reconcile(
            member, Category.CASH, date(2025, 2, 1), date(2025, 2, 28)
        )

        assert rec.opening_balance == Decimal("500")
        assert rec.closing_balance == Decimal("500")
        assert rec.total_increase == 0
        assert rec.total_decrease == 0
        assert rec.transactions == []

    def test_opening_falls_back_to_seed(self, db_session, make_member):
        member = make_member(vip_voucher_amount=Decimal("1500"))

        rec = ReportService(db_session).reconcile(
            member, Category.VIP_VOUCHER, date(2025, 1, 1), date(2025, 1, 31)
        )

        assert rec.opening_balance == Decimal("1500")
        assert rec.closing_balance == Decimal("1500")

    def test_other_categories_ignored(
        self, db_session, make_member, adjustment
    ):
        member = make_member()
        record(db_session, member, adjustment,
               category=Category.GIFT_BOAT, magnitude=Decimal("60"),
               transaction_date=date(2025, 1, 5))

        rec = ReportService(db_session).reconcile(
            member, Category.CASH, date(2025, 1, 1), date(2025, 1, 31)
        )

        assert rec.transactions == []
        assert rec.is_empty

    def test_totals_ignore_stored_sign(
        self, db_session, make_member, adjustment
    ):
        member = make_member()
        txn = record(db_session, member, adjustment,
                     adjust_type=AdjustType.DECREASE, magnitude=Decimal("80"),
                     transaction_date=date(2025, 1, 5))
        txn.amount = Decimal("-80")
        db_session.commit()

        rec = ReportService(db_session).reconcile(
            member, Category.CASH, date(2025, 1, 1), date(2025, 1, 31)
        )

        assert rec.total_decrease == Decimal("80")
        assert rec.total_increase == 0

    def test_missing_snapshot_replays_history(
        self, db_session, make_member, adjustment
    ):
        member = make_member(balance=Decimal("1000"))
        first = record(db_session, member, adjustment,
                       magnitude=Decimal("200"),
                       transaction_date=date(2024, 12, 1))
        record(db_session, member, adjustment,
               adjust_type=AdjustType.DECREASE, magnitude=Decimal("50"),
               transaction_date=date(2025, 1, 3))
        first.balance_after = None
        db_session.commit()

        rec = ReportService(db_session).reconcile(
            member, Category.CASH, date(2025, 1, 1), date(2025, 1, 31)
        )

        assert rec.opening_balance == Decimal("1200")
        assert rec.closing_balance == Decimal("1150")

    def test_same_day_uses_insertion_order(
        self, db_session, make_member, adjustment
    ):
        member = make_member()
        record(db_session, member, adjustment,
               magnitude=Decimal("100"), transaction_date=date(2025, 1, 5))
        record(db_session, member, adjustment,
               magnitude=Decimal("40"), transaction_date=date(2025, 1, 5))

        rec = ReportService(db_session).reconcile(
            member, Category.CASH, date(2025, 1, 5), date(2025, 1, 5)
        )

        assert rec.closing_balance == Decimal("140")

    def test_repeated_calls_are_identical(
        self, db_session, make_member, adjustment
    ):
        member = make_member()
        record(db_session, member, adjustment,
               magnitude=Decimal("300"), transaction_date=date(2025, 1, 5))
        service = ReportService(db_session)

        first = service.reconcile(
            member, Category.CASH, date(2025, 1, 1), date(2025, 1, 31)
        )
        second = service.reconcile(
            member, Category.CASH, date(2025, 1, 1), date(2025, 1, 31)
        )

        assert first == second

    def test_query_failure_becomes_storage_error(
        self, db_session, make_member, monkeypatch
    ):
        member = make_member()

        def failing_execute(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "execute", failing_execute)

        with pytest.raises(StorageError):
            ReportService(db_session).reconcile(
                member, Category.CASH, date(2025, 1, 1), date(2025, 1, 31)
            )

    def test_inverted_window_rejected(self, db_session, make_member):
        member = make_member()
        with pytest.raises(ValidationError):
            ReportService(db_session).reconcile(
                member, Category.CASH, date(2025, 2, 1), date(2025, 1, 1)
            )


class TestMonthlyStatement:

    def test_month_window(self):
        assert month_window(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_window(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))

    def test_invalid_month_rejected(self):
        with pytest.raises(ValidationError):
            month_window(2025, 13)

    @pytest.mark.parametrize("year", [0, 10000])
    def test_out_of_range_year_rejected(self, year):
        with pytest.raises(ValidationError, match="year"):
            month_window(year, 1)

    def test_one_entry_per_category(self, db_session, make_member, adjustment):
        member = make_member()
        record(db_session, member, adjustment,
               category=Category.BOAT_VOUCHER_G23, magnitude=Decimal("90"),
               transaction_date=date(2025, 3, 9))

        statement = ReportService(db_session).monthly_statement(member, 2025, 3)

        assert [r.category for r in statement] == list(Category)
        g23 = statement[list(Category).index(Category.BOAT_VOUCHER_G23)]
        assert g23.closing_balance == 90
        assert g23.total_increase == 90

    def test_selected_categories_only(self, db_session, make_member):
        member = make_member()
        statement = ReportService(db_session).monthly_statement(
            member, 2025, 3, [Category.GIFT_BOAT, Category.CASH]
        )
        assert [r.category for r in statement] == [
            Category.GIFT_BOAT, Category.CASH,
        ]
