"""Attendance CRUD - member self check-in"""
import logging
from datetime import datetime, timedelta

from sqlalchemy import and_
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import CHECKIN_DEDUP_MINUTES
from app.core.clock import to_utc
from app.core.database import db_operation
from app.core.logging_utils import log_business_event
from app.portal.models.attendance import Attendance
from app.portal.schemas.attendance import CheckInResponse
from app.portal.services.entitlement_gate import assert_can_book

logger = logging.getLogger(__name__)


@db_operation
async def self_check_in(
    session: AsyncSession,
    gym_id: int,
    member_id: int,
    now: datetime,
    dedup_minutes: int = CHECKIN_DEDUP_MINUTES,
) -> CheckInResponse:
    """
    Record a member arriving at the gym.

    Same entitlement gate as booking. A second check-in within the dedup
    window is reported back (success=False) instead of being recorded.
    """
    await assert_can_book(session, gym_id, member_id, now)

    checked_in_at = to_utc(now)
    window_start = checked_in_at - timedelta(minutes=dedup_minutes)

    recent_query = (
        select(Attendance)
        .where(
            and_(
                Attendance.gym_id == gym_id,
                Attendance.member_id == member_id,
                Attendance.checked_in_at >= window_start,
            )
        )
        .order_by(Attendance.checked_in_at.desc())
        .limit(1)
    )
    result = await session.execute(recent_query)
    recent = result.scalar_one_or_none()

    if recent:
        return CheckInResponse(
            success=False,
            message="Already checked in recently",
            attendance_id=recent.id,
            checked_in_at=to_utc(recent.checked_in_at),
        )

    attendance = Attendance(gym_id=gym_id, member_id=member_id, checked_in_at=checked_in_at)
    session.add(attendance)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(attendance)

    log_business_event("member_checked_in", "member", member_id, {"gym_id": gym_id})

    return CheckInResponse(
        success=True,
        message="Check-in successful",
        attendance_id=attendance.id,
        checked_in_at=checked_in_at,
    )
