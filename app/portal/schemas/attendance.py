"""Attendance Schemas - self check-in"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CheckInResponse(BaseModel):
    success: bool
    message: str
    attendance_id: Optional[int] = None
    checked_in_at: Optional[datetime] = None
