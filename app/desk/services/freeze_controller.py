import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict

from sqlalchemy import update
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import local_date, to_utc
from app.core.exceptions import InvalidStateError, NotFoundError
from app.core.logging_utils import log_business_event
from app.desk.models.members import Member
from app.desk.models.memberships import Membership
from app.desk.schemas.memberships import (
    ActiveState,
    FrozenState,
    MembershipState,
    MembershipStatus,
    state_columns,
)
from app.desk.services.entitlement_clock import derive_status

logger = logging.getLogger(__name__)


def resumed_end_date(end_date: date, frozen_at: datetime, now: datetime) -> date:
    """
    End date after a pause from `frozen_at` to `now`.

    The window grows by the whole days actually spent frozen, regardless of
    the resume date planned at freeze time.
    """
    elapsed = to_utc(now) - to_utc(frozen_at)
    return end_date + timedelta(days=max(elapsed.days, 0))


class FreezeController:
    """Pause and resume of membership entitlement windows"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def freeze(
        self, gym_id: int, membership_id: int, planned_resume_date: date, now: datetime
    ) -> Membership:
        membership = await self._get_membership(gym_id, membership_id)

        if derive_status(membership, now) != MembershipStatus.active:
            raise InvalidStateError(
                "Cannot freeze a non-active membership",
                {"membership_id": membership_id, "status": membership.status.value},
            )

        if planned_resume_date <= local_date(now):
            raise InvalidStateError(
                "Resume date must be in the future",
                {"planned_resume_date": planned_resume_date.isoformat()},
            )

        frozen = FrozenState(frozen_at=to_utc(now), planned_resume_date=planned_resume_date)
        await self._transition(membership, MembershipStatus.active, frozen)

        log_business_event(
            "membership_frozen",
            "membership",
            membership.id,
            {"planned_resume_date": planned_resume_date.isoformat()},
        )
        return membership

    async def unfreeze(self, gym_id: int, membership_id: int, now: datetime) -> Membership:
        membership = await self._get_membership(gym_id, membership_id)

        if membership.status != MembershipStatus.frozen:
            raise InvalidStateError(
                "Membership is not frozen",
                {"membership_id": membership_id, "status": membership.status.value},
            )

        previous_end_date = membership.end_date
        new_end_date = resumed_end_date(previous_end_date, membership.frozen_at, now)
        await self._transition(
            membership, MembershipStatus.frozen, ActiveState(), end_date=new_end_date
        )

        log_business_event(
            "membership_unfrozen",
            "membership",
            membership.id,
            {
                "previous_end_date": previous_end_date.isoformat(),
                "end_date": new_end_date.isoformat(),
                "days_added": (new_end_date - previous_end_date).days,
            },
        )
        return membership

    async def _get_membership(self, gym_id: int, membership_id: int) -> Membership:
        query = (
            select(Membership)
            .join(Member, Membership.member_id == Member.id)
            .where(Membership.id == membership_id, Member.gym_id == gym_id)
        )
        result = await self.session.execute(query)
        membership = result.scalar_one_or_none()

        if not membership:
            raise NotFoundError("Membership", str(membership_id))
        return membership

    async def _transition(
        self,
        membership: Membership,
        expected_status: MembershipStatus,
        new_state: MembershipState,
        **extra_values: Any,
    ) -> None:
        """
        Write a new state only if the row still has the status and version
        that were read; otherwise a concurrent transition won.
        """
        values: Dict[str, Any] = {
            **state_columns(new_state),
            **extra_values,
            "version": Membership.version + 1,
        }
        stmt = (
            update(Membership)
            .where(
                Membership.id == membership.id,
                Membership.status == expected_status,
                Membership.version == membership.version,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.session.execute(stmt)
            if result.rowcount != 1:
                raise InvalidStateError(
                    "Membership was changed by another request",
                    {"membership_id": membership.id, "expected_status": expected_status.value},
                )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(membership)
        logger.debug(
            f"Membership {membership.id} moved {expected_status.value} -> {membership.status.value}",
            extra={"membership_id": membership.id, "version": membership.version},
        )
