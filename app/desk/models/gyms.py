"""Gym Model - tenant root"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Gym(Base):
    __tablename__ = "gyms"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship("Member", back_populates="gym", cascade="all, delete")
    classes = relationship("ClassTemplate", back_populates="gym", cascade="all, delete")

    def __repr__(self):
        return f"<Gym(id={self.id}, name={self.name})>"
