"""Membership status derivation and the expiry sweep"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import local_date
from app.core.logging_utils import log_business_event
from app.desk.models.members import Member
from app.desk.models.memberships import Membership
from app.desk.schemas.memberships import ExpiredState, MembershipStatus, state_columns

logger = logging.getLogger(__name__)

# Statuses the clock never overrides. A frozen membership does not expire
# while paused; it resumes clock evaluation on unfreeze.
_CLOCK_EXEMPT = frozenset(
    [
        MembershipStatus.frozen,
        MembershipStatus.cancelled,
        MembershipStatus.expired,
        MembershipStatus.pending,
    ]
)


def derive_status(membership, now: datetime) -> MembershipStatus:
    """
    Effective status of a membership at `now`.

    Works on anything exposing `status` and `end_date`. The end date is
    inclusive: a membership ending today is still active today.
    """
    status = MembershipStatus(membership.status)
    if status in _CLOCK_EXEMPT:
        return status
    if local_date(now) <= membership.end_date:
        return MembershipStatus.active
    return MembershipStatus.expired


def days_remaining(membership, now: datetime) -> Optional[int]:
    if derive_status(membership, now) != MembershipStatus.active:
        return None
    return (membership.end_date - local_date(now)).days


async def sync_expired(session: AsyncSession, gym_id: int, now: datetime) -> int:
    """
    Persist ACTIVE -> EXPIRED for every lapsed membership of a gym.

    A single predicate-filtered UPDATE: the store re-evaluates
    "status = active AND end_date < today" at write time, so repeated or
    concurrent sweeps only ever touch rows that still qualify.
    """
    today = local_date(now)
    gym_members = select(Member.id).where(Member.gym_id == gym_id)

    stmt = (
        update(Membership)
        .where(
            Membership.status == MembershipStatus.active,
            Membership.end_date < today,
            Membership.member_id.in_(gym_members),
        )
        .values(version=Membership.version + 1, **state_columns(ExpiredState()))
        .execution_options(synchronize_session=False)
    )

    try:
        result = await session.execute(stmt)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    updated_count = result.rowcount or 0
    logger.info(
        f"Expired memberships synced for gym {gym_id}: {updated_count}",
        extra={"gym_id": gym_id, "updated_count": updated_count, "as_of": today.isoformat()},
    )
    if updated_count:
        log_business_event(
            "memberships_expired", "gym", gym_id, {"updated_count": updated_count}
        )
    return updated_count
