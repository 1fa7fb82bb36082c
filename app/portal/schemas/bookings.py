"""Class Booking Schemas - booking actions and the portal class list"""
from datetime import date, datetime, time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.portal.models.bookings import BookingStatus


class BookingAction(str, Enum):
    book = "book"
    cancel = "cancel"


class ClassActionRequest(BaseModel):
    """Portal request: act on the next occurrence of a class"""
    class_id: int = Field(..., gt=0)
    action: str

    class Config:
        json_schema_extra = {"example": {"class_id": 1, "action": "book"}}


class BookClassRequest(BaseModel):
    """Front desk request: book a member onto a dated occurrence"""
    member_id: int = Field(..., gt=0)
    date: date

    class Config:
        json_schema_extra = {"example": {"member_id": 7, "date": "2026-10-21"}}


class CancelClassBookingRequest(BaseModel):
    member_id: int = Field(..., gt=0)
    date: date


class BookClassResponse(BaseModel):
    """Response after booking"""
    success: bool
    message: str
    booking_id: Optional[int] = None
    occurrence_date: Optional[date] = None
    # True only when a new booking row was inserted
    created: bool = True


class CancelBookingResponse(BaseModel):
    success: bool
    message: str
    occurrence_date: Optional[date] = None
    # False when there was nothing to cancel
    cancelled: bool = False


class BookingRead(BaseModel):
    id: int
    class_id: int
    member_id: int
    date: date
    status: BookingStatus
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RosterEntry(BaseModel):
    booking_id: int
    member_id: int
    member_name: str
    booked_at: Optional[datetime] = None


class OccurrenceRosterResponse(BaseModel):
    class_id: int
    date: date
    capacity: int
    booked_count: int
    participants: List[RosterEntry]


class ClassOccurrenceRead(BaseModel):
    """One class template with its next occurrence, as listed in the portal"""
    id: int
    name: str
    instructor: Optional[str] = None
    weekday: int
    day_name: str
    start_time: time
    end_time: time
    capacity: int

    next_date: date
    booked_count: int = 0
    is_full: bool = False
    is_today: bool = False
    my_booking: Optional[BookingRead] = None


class ClassScheduleResponse(BaseModel):
    classes: List[ClassOccurrenceRead]
    total: int
