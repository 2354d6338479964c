"""
Member account endpoints.

Thin HTTP layer: status codes and response shapes here,
business rules in the services.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from club_ledger.errors import LedgerError
from club_ledger.models.base import get_db
from club_ledger.models.enums import Category
from club_ledger.services.ledger_service import LedgerService
from club_ledger.services.member_service import MemberService
from club_ledger.schemas.member import (
    MemberCreate,
    MemberResponse,
    BalanceDriftResponse,
    BalanceRepairResponse,
)

router = APIRouter(prefix="/members", tags=["Members"])


@router.post("", response_model=MemberResponse, status_code=201)
def create_member(
    request: MemberCreate,
    db: Session = Depends(get_db),
):
    """Create a member account with optional seed balances."""
    service = MemberService(db)
    try:
        member = service.create_member(request)
        db.commit()
        return member
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.http_status, detail=e.message)


@router.get("", response_model=list[MemberResponse])
def list_members(db: Session = Depends(get_db)):
    return MemberService(db).list_members()


@router.get("/{member_id}", response_model=MemberResponse)
def get_member(
    member_id: int,
    db: Session = Depends(get_db),
):
    """Member with current balances."""
    try:
        return MemberService(db).get_member(member_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)


@router.get("/{member_id}/drift", response_model=list[BalanceDriftResponse])
def get_balance_drift(
    member_id: int,
    db: Session = Depends(get_db),
):
    """
    Categories whose stored balance disagrees with the balance
    replayed from the transaction history. Empty when consistent.
    """
    try:
        member = MemberService(db).get_member(member_id)
        drift = LedgerService(db).find_drift(member)
    except LedgerError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)
    return [BalanceDriftResponse.model_validate(d) for d in drift.values()]


@router.post(
    "/{member_id}/balances/{category}/repair",
    response_model=BalanceRepairResponse,
)
def repair_balance(
    member_id: int,
    category: Category,
    db: Session = Depends(get_db),
):
    """Reset a stored balance to the value replayed from history."""
    try:
        member = MemberService(db).get_member(member_id)
        balance = LedgerService(db).repair_balance(member, category)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.http_status, detail=e.message)
    return BalanceRepairResponse(
        member_id=member_id, category=category, balance=balance
    )
