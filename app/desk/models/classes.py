"""Class Template Model - weekly recurring class definition"""
from sqlalchemy import (
    Column,
    Integer,
    SmallInteger,
    String,
    Boolean,
    DateTime,
    Time,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class ClassTemplate(Base):
    __tablename__ = "class_templates"

    id = Column(Integer, primary_key=True, index=True)
    gym_id = Column(
        Integer, ForeignKey("gyms.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name = Column(String(100), nullable=False)
    instructor = Column(String(100), nullable=True)

    # 0 = воскресенье ... 6 = суббота
    weekday = Column(SmallInteger, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    capacity = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    gym = relationship("Gym", back_populates="classes")

    __table_args__ = (
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_class_template_weekday"),
        CheckConstraint("capacity > 0", name="ck_class_template_capacity"),
    )

    def __repr__(self):
        return f"<ClassTemplate(id={self.id}, weekday={self.weekday}, capacity={self.capacity})>"
