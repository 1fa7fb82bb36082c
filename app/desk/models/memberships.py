"""Membership Model - one member's entitlement window for one plan"""
from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    Text,
    ForeignKey,
    CheckConstraint,
    Index,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.desk.schemas.memberships import (
    MembershipState,
    MembershipStatus,
    state_from_columns,
)


class Membership(Base):
    __tablename__ = "memberships"

    id = Column(Integer, primary_key=True, index=True)

    member_id = Column(
        Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_id = Column(Integer, ForeignKey("plans.id", ondelete="SET NULL"), nullable=True)

    # Окно абонемента (включительно)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    status = Column(
        SQLEnum(MembershipStatus, name="membership_status"),
        default=MembershipStatus.active,
        nullable=False,
    )

    # Заморозка: set only while status is frozen
    frozen_at = Column(DateTime(timezone=True), nullable=True)
    frozen_until_planned = Column(Date, nullable=True)

    # Bumped by every state transition; conditional writes compare it
    version = Column(Integer, default=1, nullable=False)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    member = relationship("Member", back_populates="memberships")
    plan = relationship("Plan")

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_membership_window"),
        CheckConstraint(
            "(status = 'frozen') = (frozen_at IS NOT NULL)",
            name="ck_membership_frozen_marker",
        ),
        Index("ix_membership_member_status", "member_id", "status"),
        Index("ix_membership_status_end_date", "status", "end_date"),
    )

    @property
    def state(self) -> MembershipState:
        return state_from_columns(self.status, self.frozen_at, self.frozen_until_planned)

    def __repr__(self):
        return f"<Membership(id={self.id}, member_id={self.member_id}, status={self.status})>"
