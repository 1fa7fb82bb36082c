"""Membership CRUD - front desk freeze/unfreeze, expiry sweep and listings"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import local_date
from app.core.config import EXPIRING_WINDOW_DAYS
from app.core.database import db_operation
from app.core.exceptions import NotFoundError
from app.desk.models.members import Member
from app.desk.models.memberships import Membership
from app.desk.models.plans import Plan
from app.desk.schemas.memberships import (
    ExpiringMembershipRead,
    MembershipRead,
    MembershipStatus,
)
from app.desk.services import entitlement_clock
from app.desk.services.entitlement_clock import days_remaining, derive_status
from app.desk.services.freeze_controller import FreezeController
from app.portal.services.entitlement_gate import get_current_memberships

logger = logging.getLogger(__name__)


def build_membership_read(
    membership: Membership, now: datetime, plan_name: Optional[str] = None
) -> MembershipRead:
    return MembershipRead(
        id=membership.id,
        member_id=membership.member_id,
        plan_id=membership.plan_id,
        plan_name=plan_name,
        start_date=membership.start_date,
        end_date=membership.end_date,
        status=membership.status,
        effective_status=derive_status(membership, now),
        state=membership.state,
        days_remaining=days_remaining(membership, now),
    )


async def _plan_name(session: AsyncSession, plan_id: Optional[int]) -> Optional[str]:
    if plan_id is None:
        return None
    plan = await session.get(Plan, plan_id)
    return plan.name if plan else None


@db_operation
async def freeze_membership(
    session: AsyncSession,
    gym_id: int,
    membership_id: int,
    planned_resume_date: date,
    now: datetime,
) -> MembershipRead:
    controller = FreezeController(session)
    membership = await controller.freeze(gym_id, membership_id, planned_resume_date, now)
    return build_membership_read(membership, now, await _plan_name(session, membership.plan_id))


@db_operation
async def unfreeze_membership(
    session: AsyncSession, gym_id: int, membership_id: int, now: datetime
) -> MembershipRead:
    controller = FreezeController(session)
    membership = await controller.unfreeze(gym_id, membership_id, now)
    return build_membership_read(membership, now, await _plan_name(session, membership.plan_id))


@db_operation
async def sync_expired_memberships(session: AsyncSession, gym_id: int, now: datetime) -> int:
    return await entitlement_clock.sync_expired(session, gym_id, now)


@db_operation
async def get_expiring_memberships(
    session: AsyncSession,
    gym_id: int,
    now: datetime,
    within_days: int = EXPIRING_WINDOW_DAYS,
) -> List[ExpiringMembershipRead]:
    """
    Memberships needing a renewal call: ACTIVE ones ending within
    `within_days`, plus the ones already expired. Soonest end first.

    ACTIVE rows already past their end date (not swept yet) are listed as
    expired.
    """
    today = local_date(now)
    horizon = today + timedelta(days=within_days)

    query = (
        select(Membership, Member, Plan)
        .join(Member, Membership.member_id == Member.id)
        .outerjoin(Plan, Membership.plan_id == Plan.id)
        .where(
            and_(
                Member.gym_id == gym_id,
                or_(
                    and_(
                        Membership.status == MembershipStatus.active,
                        Membership.end_date <= horizon,
                    ),
                    Membership.status == MembershipStatus.expired,
                ),
            )
        )
        .order_by(Membership.end_date.asc(), Membership.id.asc())
    )
    result = await session.execute(query)

    expiring = []
    for membership, member, plan in result.all():
        expiring.append(
            ExpiringMembershipRead(
                id=membership.id,
                member_id=member.id,
                member_name=member.name,
                plan_name=plan.name if plan else None,
                end_date=membership.end_date,
                status=derive_status(membership, now),
                days_remaining=(membership.end_date - today).days,
            )
        )

    return expiring


@db_operation
async def get_member_current_membership(
    session: AsyncSession, gym_id: int, member_id: int, now: datetime
) -> MembershipRead:
    """Current ACTIVE or FROZEN membership of a member, for the portal"""
    memberships = await get_current_memberships(session, gym_id, member_id)
    if not memberships:
        raise NotFoundError("Membership", f"member {member_id}")

    # Prefer one that is usable right now
    current = next(
        (m for m in memberships if derive_status(m, now) == MembershipStatus.active),
        memberships[0],
    )
    return build_membership_read(current, now, await _plan_name(session, current.plan_id))
