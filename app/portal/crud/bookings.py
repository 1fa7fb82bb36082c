"""Class Booking CRUD - capacity-checked booking ledger for class occurrences"""
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, func, update
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import local_date, to_utc
from app.core.database import acquire_occurrence_lock, db_operation
from app.core.exceptions import CapacityExceededError, NotFoundError, ValidationError
from app.core.logging_utils import log_business_event
from app.desk.models.classes import ClassTemplate
from app.desk.models.members import Member
from app.desk.services.occurrence_resolver import (
    DAY_NAMES,
    occurrence_key,
    resolve_next_occurrence,
    template_weekday,
)
from app.portal.models.bookings import BookingStatus, ClassBooking
from app.portal.schemas.bookings import (
    BookClassResponse,
    BookingAction,
    BookingRead,
    CancelBookingResponse,
    ClassOccurrenceRead,
    OccurrenceRosterResponse,
    RosterEntry,
)
from app.portal.services.entitlement_gate import assert_can_book

logger = logging.getLogger(__name__)


async def get_gym_class(
    session: AsyncSession, gym_id: int, class_id: int, require_active: bool = True
) -> ClassTemplate:
    """Class template of the gym; inactive ones count as missing when booking"""
    query = select(ClassTemplate).where(
        and_(ClassTemplate.id == class_id, ClassTemplate.gym_id == gym_id)
    )
    result = await session.execute(query)
    template = result.scalar_one_or_none()

    if template is None or (require_active and not template.is_active):
        raise NotFoundError("Class", str(class_id))
    return template


async def _get_booking(
    session: AsyncSession, class_id: int, member_id: int, occurrence_date: date
) -> Optional[ClassBooking]:
    # Read under the occurrence lock: must reflect the stored row, not the identity map
    query = (
        select(ClassBooking)
        .where(
            and_(
                ClassBooking.class_id == class_id,
                ClassBooking.member_id == member_id,
                ClassBooking.date == occurrence_date,
            )
        )
        .execution_options(populate_existing=True)
    )
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def count_confirmed(session: AsyncSession, class_id: int, occurrence_date: date) -> int:
    query = (
        select(func.count())
        .select_from(ClassBooking)
        .where(
            and_(
                ClassBooking.class_id == class_id,
                ClassBooking.date == occurrence_date,
                ClassBooking.status == BookingStatus.confirmed,
            )
        )
    )
    result = await session.execute(query)
    return result.scalar() or 0


@db_operation
async def book_class(
    session: AsyncSession,
    gym_id: int,
    class_id: int,
    member_id: int,
    occurrence_date: date,
    now: datetime,
) -> BookClassResponse:
    """
    Book a member onto one class occurrence.

    Order of checks: class exists and is active (NotFound), the date falls on
    the class weekday (Validation), the member holds an active membership
    (Unauthorized), a seat is free (CapacityExceeded).
    The seat count and the write happen under the occurrence lock in one
    transaction, so concurrent bookings of the same occurrence admit one at a
    time. Booking an already confirmed seat is a successful no-op; a
    cancelled seat is flipped back on the same row.
    """
    try:
        template = await get_gym_class(session, gym_id, class_id)
        if template_weekday(occurrence_date) != template.weekday:
            raise ValidationError(
                "Class does not run on this date",
                {
                    "class_id": class_id,
                    "date": occurrence_date.isoformat(),
                    "day_of_week": DAY_NAMES[template.weekday],
                },
            )
        await assert_can_book(session, gym_id, member_id, now)

        key = occurrence_key(class_id, occurrence_date)
        await acquire_occurrence_lock(session, *key.lock_key)

        booking = await _get_booking(session, class_id, member_id, occurrence_date)
        if booking is not None and booking.status == BookingStatus.confirmed:
            await session.commit()
            return BookClassResponse(
                success=True,
                message="You are already booked for this class",
                booking_id=booking.id,
                occurrence_date=occurrence_date,
                created=False,
            )

        booked_count = await count_confirmed(session, class_id, occurrence_date)
        if booked_count >= template.capacity:
            logger.info(
                f"Class {class_id} on {occurrence_date} is full",
                extra={
                    "class_id": class_id,
                    "date": occurrence_date.isoformat(),
                    "capacity": template.capacity,
                    "member_id": member_id,
                },
            )
            raise CapacityExceededError(class_id, occurrence_date.isoformat(), template.capacity)

        rebooked = booking is not None
        if booking is None:
            booking = ClassBooking(
                class_id=class_id,
                member_id=member_id,
                date=occurrence_date,
                status=BookingStatus.confirmed,
            )
            session.add(booking)
        else:
            booking.status = BookingStatus.confirmed
            booking.cancelled_at = None

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    log_business_event(
        "booking_confirmed",
        "booking",
        booking.id,
        {
            "class_id": class_id,
            "member_id": member_id,
            "date": occurrence_date.isoformat(),
            "rebooked": rebooked,
            "seats_taken": booked_count + 1,
        },
    )

    return BookClassResponse(
        success=True,
        message="Booking confirmed",
        booking_id=booking.id,
        occurrence_date=occurrence_date,
        created=not rebooked,
    )


@db_operation
async def cancel_class_booking(
    session: AsyncSession,
    gym_id: int,
    class_id: int,
    member_id: int,
    occurrence_date: date,
    now: datetime,
) -> CancelBookingResponse:
    """
    Cancel a member's seat on one occurrence.

    Always succeeds: cancelling a missing or already cancelled booking (or
    one under another gym's class) changes nothing.
    """
    gym_classes = select(ClassTemplate.id).where(ClassTemplate.gym_id == gym_id)
    stmt = (
        update(ClassBooking)
        .where(
            and_(
                ClassBooking.class_id == class_id,
                ClassBooking.member_id == member_id,
                ClassBooking.date == occurrence_date,
                ClassBooking.status == BookingStatus.confirmed,
                ClassBooking.class_id.in_(gym_classes),
            )
        )
        .values(status=BookingStatus.cancelled, cancelled_at=to_utc(now))
        .execution_options(synchronize_session=False)
    )

    try:
        result = await session.execute(stmt)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    cancelled = (result.rowcount or 0) > 0
    if cancelled:
        log_business_event(
            "booking_cancelled",
            "class",
            class_id,
            {"member_id": member_id, "date": occurrence_date.isoformat()},
        )

    return CancelBookingResponse(
        success=True,
        message="Booking cancelled" if cancelled else "No active booking to cancel",
        occurrence_date=occurrence_date,
        cancelled=cancelled,
    )


async def act_on_next_occurrence(
    session: AsyncSession,
    gym_id: int,
    member_id: int,
    class_id: int,
    action: str,
    now: datetime,
):
    """Portal entry point: book or cancel the next occurrence of a class"""
    try:
        action = BookingAction(action)
    except ValueError:
        raise ValidationError("Invalid action", {"action": action})

    template = await get_gym_class(
        session, gym_id, class_id, require_active=action == BookingAction.book
    )
    occurrence_date = resolve_next_occurrence(template.weekday, now)

    if action == BookingAction.book:
        return await book_class(session, gym_id, class_id, member_id, occurrence_date, now)
    return await cancel_class_booking(session, gym_id, class_id, member_id, occurrence_date, now)


@db_operation
async def get_class_schedule(
    session: AsyncSession, gym_id: int, member_id: int, now: datetime
) -> List[ClassOccurrenceRead]:
    """Active classes of the gym with seat counts for their next occurrence"""
    query = (
        select(ClassTemplate)
        .where(and_(ClassTemplate.gym_id == gym_id, ClassTemplate.is_active.is_(True)))
        .order_by(ClassTemplate.weekday.asc(), ClassTemplate.start_time.asc())
    )
    result = await session.execute(query)
    templates = result.scalars().all()
    if not templates:
        return []

    today = local_date(now)
    next_dates = {t.id: resolve_next_occurrence(t.weekday, now) for t in templates}
    class_ids = list(next_dates)
    dates = set(next_dates.values())

    counts_query = (
        select(ClassBooking.class_id, ClassBooking.date, func.count())
        .where(
            and_(
                ClassBooking.class_id.in_(class_ids),
                ClassBooking.date.in_(dates),
                ClassBooking.status == BookingStatus.confirmed,
            )
        )
        .group_by(ClassBooking.class_id, ClassBooking.date)
    )
    counts_result = await session.execute(counts_query)
    counts: Dict[Tuple[int, date], int] = {
        (class_id, day): count for class_id, day, count in counts_result.all()
    }

    mine_query = select(ClassBooking).where(
        and_(
            ClassBooking.member_id == member_id,
            ClassBooking.class_id.in_(class_ids),
            ClassBooking.date.in_(dates),
            ClassBooking.status == BookingStatus.confirmed,
        )
    )
    mine_result = await session.execute(mine_query)
    mine = {(b.class_id, b.date): b for b in mine_result.scalars().all()}

    schedule = []
    for template in templates:
        next_date = next_dates[template.id]
        booked_count = counts.get((template.id, next_date), 0)
        my_booking = mine.get((template.id, next_date))

        schedule.append(
            ClassOccurrenceRead(
                id=template.id,
                name=template.name,
                instructor=template.instructor,
                weekday=template.weekday,
                day_name=DAY_NAMES[template.weekday],
                start_time=template.start_time,
                end_time=template.end_time,
                capacity=template.capacity,
                next_date=next_date,
                booked_count=booked_count,
                is_full=booked_count >= template.capacity,
                is_today=next_date == today,
                my_booking=BookingRead.model_validate(my_booking) if my_booking else None,
            )
        )

    return schedule


@db_operation
async def get_occurrence_roster(
    session: AsyncSession, gym_id: int, class_id: int, occurrence_date: date
) -> OccurrenceRosterResponse:
    """Confirmed participants of one occurrence, in booking order"""
    template = await get_gym_class(session, gym_id, class_id, require_active=False)

    query = (
        select(ClassBooking, Member)
        .join(Member, ClassBooking.member_id == Member.id)
        .where(
            and_(
                ClassBooking.class_id == class_id,
                ClassBooking.date == occurrence_date,
                ClassBooking.status == BookingStatus.confirmed,
            )
        )
        .order_by(ClassBooking.created_at.asc(), ClassBooking.id.asc())
    )
    result = await session.execute(query)

    participants = [
        RosterEntry(
            booking_id=booking.id,
            member_id=member.id,
            member_name=member.name,
            booked_at=booking.created_at,
        )
        for booking, member in result.all()
    ]

    return OccurrenceRosterResponse(
        class_id=class_id,
        date=occurrence_date,
        capacity=template.capacity,
        booked_count=len(participants),
        participants=participants,
    )
