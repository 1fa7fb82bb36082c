"""Entitlement gate shared by class booking and self check-in"""
import logging
from datetime import datetime
from typing import List

from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UnauthorizedError
from app.desk.models.members import Member
from app.desk.models.memberships import Membership
from app.desk.schemas.memberships import MembershipStatus
from app.desk.services.entitlement_clock import derive_status

logger = logging.getLogger(__name__)


async def get_current_memberships(
    session: AsyncSession, gym_id: int, member_id: int
) -> List[Membership]:
    """The member's ACTIVE or FROZEN memberships within the gym, latest end first"""
    query = (
        select(Membership)
        .join(Member, Membership.member_id == Member.id)
        .where(
            Membership.member_id == member_id,
            Member.gym_id == gym_id,
            Membership.status.in_([MembershipStatus.active, MembershipStatus.frozen]),
        )
        .order_by(Membership.end_date.desc())
    )
    result = await session.execute(query)
    return list(result.scalars().all())


async def assert_can_book(
    session: AsyncSession, gym_id: int, member_id: int, now: datetime
) -> Membership:
    """
    Pass only members whose current membership derives to ACTIVE at `now`.

    Unknown members, members of another gym, frozen memberships and
    memberships past their end date (swept or not) are all refused the same
    way.
    """
    memberships = await get_current_memberships(session, gym_id, member_id)

    for membership in memberships:
        if derive_status(membership, now) == MembershipStatus.active:
            return membership

    logger.info(
        f"Entitlement denied for member {member_id}",
        extra={
            "gym_id": gym_id,
            "member_id": member_id,
            "membership_ids": [m.id for m in memberships],
        },
    )
    raise UnauthorizedError("No active membership", {"member_id": member_id})
