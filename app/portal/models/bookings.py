"""Class Booking Model - a member's claim on one dated class occurrence"""
from enum import Enum
from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class BookingStatus(str, Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"


class ClassBooking(Base):
    """Never deleted: cancel and rebook flip the status of the same row"""
    __tablename__ = "class_bookings"

    id = Column(Integer, primary_key=True, index=True)

    class_id = Column(
        Integer, ForeignKey("class_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    member_id = Column(
        Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Дата занятия (без времени)
    date = Column(Date, nullable=False)

    status = Column(
        SQLEnum(BookingStatus, name="booking_status"),
        default=BookingStatus.confirmed,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    class_template = relationship("ClassTemplate")
    member = relationship("Member")

    __table_args__ = (
        UniqueConstraint("class_id", "member_id", "date", name="uq_class_booking_member_occurrence"),
        Index("ix_class_booking_occurrence_status", "class_id", "date", "status"),
    )

    def __repr__(self):
        return f"<ClassBooking(id={self.id}, class_id={self.class_id}, member_id={self.member_id}, date={self.date}, status={self.status})>"
