"""
Reconciliation and export endpoints. All read-only.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from club_ledger.errors import LedgerError
from club_ledger.models.base import get_db
from club_ledger.models.enums import Category
from club_ledger.services.export_service import ExportService, to_bytes
from club_ledger.services.member_service import MemberService
from club_ledger.services.report_service import ReportService
from club_ledger.schemas.report import ReconciliationResponse

router = APIRouter(tags=["Reports"])

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _csv_response(document: str, filename: str) -> Response:
    return Response(
        content=to_bytes(document),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/members/{member_id}/reconciliation",
    response_model=ReconciliationResponse,
)
def reconcile(
    member_id: int,
    category: Category,
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
):
    """Opening/closing balance and activity totals for one category."""
    try:
        member = MemberService(db).get_member(member_id)
        rec = ReportService(db).reconcile(member, category, start_date, end_date)
    except LedgerError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)
    return ReconciliationResponse.model_validate(rec)


@router.get(
    "/members/{member_id}/statements/{year}/{month}",
    response_model=list[ReconciliationResponse],
)
def monthly_statement(
    member_id: int,
    year: int,
    month: int,
    categories: list[Category] | None = Query(default=None),
    db: Session = Depends(get_db),
):
    try:
        member = MemberService(db).get_member(member_id)
        statement = ReportService(db).monthly_statement(
            member, year, month, categories
        )
    except LedgerError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)
    return [ReconciliationResponse.model_validate(rec) for rec in statement]


@router.get("/members/{member_id}/exports/{year}/{month}")
def export_member_month(
    member_id: int,
    year: int,
    month: int,
    categories: list[Category] | None = Query(default=None),
    db: Session = Depends(get_db),
):
    """Monthly statement as CSV."""
    try:
        member = MemberService(db).get_member(member_id)
        document = ExportService(db).export_member_month(
            member, year, month, categories
        )
    except LedgerError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)
    return _csv_response(document, f"statement_{member_id}_{year}{month:02d}.csv")


@router.get("/exports/general-ledger")
def export_general_ledger(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
):
    """All members' transactions in a date window as CSV."""
    try:
        document = ExportService(db).export_general_ledger(start_date, end_date)
    except LedgerError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)
    return _csv_response(
        document, f"general_ledger_{start_date}_{end_date}.csv"
    )


@router.get("/exports/balances")
def export_balance_summary(db: Session = Depends(get_db)):
    """Every member's current balances as CSV."""
    try:
        document = ExportService(db).export_balance_summary()
    except LedgerError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)
    return _csv_response(document, "member_balances.csv")
