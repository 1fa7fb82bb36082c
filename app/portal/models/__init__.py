from app.core.database import Base
from .bookings import ClassBooking, BookingStatus
from .attendance import Attendance

__all__ = [
    "Base",
    "ClassBooking",
    "BookingStatus",
    "Attendance",
]
