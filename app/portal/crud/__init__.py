"""Portal CRUD Package"""
from .bookings import (
    book_class,
    cancel_class_booking,
    act_on_next_occurrence,
    get_class_schedule,
    get_occurrence_roster,
)

from .attendance import self_check_in

__all__ = [
    # Bookings
    "book_class",
    "cancel_class_booking",
    "act_on_next_occurrence",
    "get_class_schedule",
    "get_occurrence_roster",
    # Attendance
    "self_check_in",
]
