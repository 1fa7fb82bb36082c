"""Portal Classes Router - member-facing class list and booking"""
from typing import Union

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_session
from app.core.dependencies import MemberContext, get_member_context
from app.core.limits import limiter
from app.portal.crud.bookings import act_on_next_occurrence, get_class_schedule
from app.portal.schemas.bookings import (
    BookClassResponse,
    CancelBookingResponse,
    ClassActionRequest,
    ClassScheduleResponse,
)

router = APIRouter(prefix="/portal/classes", tags=["Portal Classes"])


@router.get("", response_model=ClassScheduleResponse)
@limiter.limit("60/minute")
async def list_classes(
    request: Request,
    member: MemberContext = Depends(get_member_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Active classes of the gym with their next occurrence.

    Each entry carries the confirmed count, whether it is full, whether it
    is today and the member's own booking if there is one.
    """
    classes = await get_class_schedule(db, member.gym_id, member.member_id, clock.now())
    return ClassScheduleResponse(classes=classes, total=len(classes))


@router.post("", response_model=Union[BookClassResponse, CancelBookingResponse])
@limiter.limit("20/minute")
async def act_on_class(
    request: Request,
    action_data: ClassActionRequest,
    member: MemberContext = Depends(get_member_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Book or cancel the next occurrence of a class.

    `action` is `book` or `cancel`; anything else is rejected with 400.
    """
    return await act_on_next_occurrence(
        db,
        member.gym_id,
        member.member_id,
        action_data.class_id,
        action_data.action,
        clock.now(),
    )
