"""
Member service: creates member accounts and resolves them.

Profile management proper lives outside this engine. This
service only produces the fully resolved Member the ledger
operations need, and owns the seed values recorded when an
account starts.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from club_ledger.categories import CATEGORY_SPECS, get_spec
from club_ledger.errors import NotFoundError, StorageError
from club_ledger.models.enums import Category
from club_ledger.models.member import Member
from club_ledger.models.opening_balance import OpeningBalance
from club_ledger.schemas.member import MemberCreate

logger = logging.getLogger(__name__)


class MemberService:

    def __init__(self, db: Session):
        self.db = db

    def create_member(self, request: MemberCreate) -> Member:
        """
        Create a member with its seed balances.

        Each seed becomes the starting balance of its category.
        Non-zero seeds are also recorded as OpeningBalance rows so
        history can be replayed from the right starting point.
        """
        member = Member(name=request.name, nickname=request.nickname)
        for category, spec in CATEGORY_SPECS.items():
            seed = spec.coerce(getattr(request, spec.balance_field))
            spec.set_balance(member, seed)
            if seed != 0:
                member.opening_balances.append(
                    OpeningBalance(category=category, value=seed)
                )

        self.db.add(member)
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create member %r: %s", request.name, e)
            raise StorageError(str(e)) from e

        logger.info("Created member %s (%s)", member.id, member.name)
        return member

    def get_member(self, member_id: int) -> Member:
        member = self.db.get(Member, member_id)
        if not member:
            raise NotFoundError(f"Member {member_id} not found")
        return member

    def list_members(self) -> list[Member]:
        """All members ordered by name."""
        members = self.db.execute(
            select(Member).order_by(Member.name, Member.id)
        ).scalars().all()
        return list(members)

    def get_seed(self, member_id: int, category: Category):
        """Value the category held when the ledger started; zero if unrecorded."""
        spec = get_spec(category)
        value = self.db.execute(
            select(OpeningBalance.value).where(
                OpeningBalance.member_id == member_id,
                OpeningBalance.category == spec.category,
            )
        ).scalar_one_or_none()
        return spec.coerce(value)
