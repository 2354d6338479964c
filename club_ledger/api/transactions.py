"""
Ledger adjustment endpoints.

Every mutating route commits once after the service returns,
so a member balance and its transaction row are saved together.
Any error rolls both back.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from club_ledger.errors import LedgerError
from club_ledger.models.base import get_db
from club_ledger.models.enums import Category
from club_ledger.services.ledger_service import LedgerService
from club_ledger.services.member_service import MemberService
from club_ledger.schemas.transaction import (
    AdjustmentCreate,
    AdjustmentUpdate,
    AdjustmentResponse,
    TransactionResponse,
)

router = APIRouter(tags=["Transactions"])


@router.post(
    "/members/{member_id}/transactions",
    response_model=AdjustmentResponse,
    status_code=201,
)
def record_adjustment(
    member_id: int,
    request: AdjustmentCreate,
    db: Session = Depends(get_db),
):
    """
    Record a balance adjustment for a member.

    Balances may go negative; the affected categories are listed
    in negative_categories so the client can warn the operator.
    """
    try:
        member = MemberService(db).get_member(member_id)
        result = LedgerService(db).record_adjustment(member, request)
        response = AdjustmentResponse.model_validate(result)
        db.commit()
        return response
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.http_status, detail=e.message)


@router.get(
    "/members/{member_id}/transactions",
    response_model=list[TransactionResponse],
)
def list_transactions(
    member_id: int,
    category: Category | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    """Member transactions, newest first."""
    try:
        MemberService(db).get_member(member_id)
        return LedgerService(db).list_transactions(
            member_id, category, start_date, end_date
        )
    except LedgerError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    try:
        return LedgerService(db).get_transaction(transaction_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)


@router.put(
    "/transactions/{transaction_id}",
    response_model=AdjustmentResponse,
)
def edit_adjustment(
    transaction_id: int,
    request: AdjustmentUpdate,
    db: Session = Depends(get_db),
):
    """Rewrite an adjustment, moving it between categories if asked."""
    try:
        result = LedgerService(db).edit_adjustment(transaction_id, request)
        response = AdjustmentResponse.model_validate(result)
        db.commit()
        return response
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.http_status, detail=e.message)


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_adjustment(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    """Delete an adjustment and reverse its effect. Cannot be undone."""
    try:
        LedgerService(db).delete_adjustment(transaction_id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.http_status, detail=e.message)
    return Response(status_code=204)
