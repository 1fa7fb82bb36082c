"""Attendance Model - member check-ins"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from app.core.database import Base


class Attendance(Base):
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)

    gym_id = Column(Integer, ForeignKey("gyms.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False)

    checked_in_at = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)

    member = relationship("Member")

    __table_args__ = (
        Index("ix_attendance_member_checked_in", "member_id", "checked_in_at"),
    )

    def __repr__(self):
        return f"<Attendance(id={self.id}, member_id={self.member_id}, checked_in_at={self.checked_in_at})>"
