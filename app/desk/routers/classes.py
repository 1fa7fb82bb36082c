"""Front Desk Classes Router - booking members onto dated occurrences"""
from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_session
from app.core.dependencies import GymContext, get_gym_context
from app.core.limits import limiter
from app.portal.crud.bookings import book_class, cancel_class_booking, get_occurrence_roster
from app.portal.schemas.bookings import (
    BookClassRequest,
    BookClassResponse,
    CancelBookingResponse,
    CancelClassBookingRequest,
    OccurrenceRosterResponse,
)

router = APIRouter(prefix="/desk/classes", tags=["Desk Classes"])


@router.post("/{class_id}/bookings", response_model=BookClassResponse)
@limiter.limit("60/minute")
async def book_member(
    request: Request,
    class_id: int,
    booking_data: BookClassRequest,
    gym: GymContext = Depends(get_gym_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Book a member onto the occurrence of a class on the given date.

    - **404** class not found or inactive
    - **403** member has no active membership
    - **409** class is full
    """
    return await book_class(
        db, gym.gym_id, class_id, booking_data.member_id, booking_data.date, clock.now()
    )


@router.post("/{class_id}/bookings/cancel", response_model=CancelBookingResponse)
@limiter.limit("60/minute")
async def cancel_member_booking(
    request: Request,
    class_id: int,
    cancel_data: CancelClassBookingRequest,
    gym: GymContext = Depends(get_gym_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Cancel a member's booking. Cancelling nothing still succeeds."""
    return await cancel_class_booking(
        db, gym.gym_id, class_id, cancel_data.member_id, cancel_data.date, clock.now()
    )


@router.get("/{class_id}/bookings", response_model=OccurrenceRosterResponse)
@limiter.limit("60/minute")
async def get_roster(
    request: Request,
    class_id: int,
    occurrence_date: date = Query(..., alias="date", description="Occurrence date"),
    gym: GymContext = Depends(get_gym_context),
    db: AsyncSession = Depends(get_session),
):
    """Confirmed participants of one occurrence."""
    return await get_occurrence_roster(db, gym.gym_id, class_id, occurrence_date)
