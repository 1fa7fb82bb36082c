"""Portal Check-in Router"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_session
from app.core.dependencies import MemberContext, get_member_context
from app.core.limits import limiter
from app.portal.crud.attendance import self_check_in
from app.portal.schemas.attendance import CheckInResponse

router = APIRouter(prefix="/portal/checkin", tags=["Portal Check-in"])


@router.post("", response_model=CheckInResponse)
@limiter.limit("10/minute")
async def check_in(
    request: Request,
    member: MemberContext = Depends(get_member_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Record a check-in for the current member.

    Requires an active membership. A repeated check-in within the hour
    returns success=false with the earlier record.
    """
    return await self_check_in(db, member.gym_id, member.member_id, clock.now())
