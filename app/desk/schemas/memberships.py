"""Membership Schemas - status, tagged state variant, API payloads"""
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class MembershipStatus(str, Enum):
    """Membership status"""
    pending = "pending"
    active = "active"
    expired = "expired"
    frozen = "frozen"
    cancelled = "cancelled"


# Tagged state: only FrozenState carries the pause markers, so an ACTIVE
# membership with frozen_at set cannot be expressed.
class PendingState(BaseModel):
    status: Literal[MembershipStatus.pending] = MembershipStatus.pending


class ActiveState(BaseModel):
    status: Literal[MembershipStatus.active] = MembershipStatus.active


class FrozenState(BaseModel):
    status: Literal[MembershipStatus.frozen] = MembershipStatus.frozen
    frozen_at: datetime
    planned_resume_date: date


class ExpiredState(BaseModel):
    status: Literal[MembershipStatus.expired] = MembershipStatus.expired


class CancelledState(BaseModel):
    status: Literal[MembershipStatus.cancelled] = MembershipStatus.cancelled


MembershipState = Annotated[
    Union[PendingState, ActiveState, FrozenState, ExpiredState, CancelledState],
    Field(discriminator="status"),
]

_PLAIN_STATES = {
    MembershipStatus.pending: PendingState,
    MembershipStatus.active: ActiveState,
    MembershipStatus.expired: ExpiredState,
    MembershipStatus.cancelled: CancelledState,
}


def state_from_columns(
    status: MembershipStatus,
    frozen_at: Optional[datetime],
    frozen_until_planned: Optional[date],
) -> MembershipState:
    """Rebuild the tagged state from stored columns"""
    if status == MembershipStatus.frozen:
        return FrozenState(frozen_at=frozen_at, planned_resume_date=frozen_until_planned)
    return _PLAIN_STATES[MembershipStatus(status)]()


def state_columns(state: MembershipState) -> Dict[str, Any]:
    """Column values for a state; the only way membership status is written"""
    if isinstance(state, FrozenState):
        return {
            "status": MembershipStatus.frozen,
            "frozen_at": state.frozen_at,
            "frozen_until_planned": state.planned_resume_date,
        }
    return {
        "status": state.status,
        "frozen_at": None,
        "frozen_until_planned": None,
    }


class MembershipRead(BaseModel):
    """Membership as seen by the front desk and the portal"""
    id: int
    member_id: int
    plan_id: Optional[int] = None
    plan_name: Optional[str] = None

    start_date: date
    end_date: date

    # Stored status and the one derived from the clock (an ACTIVE row past
    # its end date reads as expired before the sweep catches up)
    status: MembershipStatus
    effective_status: MembershipStatus
    state: MembershipState

    days_remaining: Optional[int] = None

    class Config:
        from_attributes = True


class FreezeMembershipRequest(BaseModel):
    """Request to freeze membership"""
    planned_resume_date: date

    class Config:
        json_schema_extra = {"example": {"planned_resume_date": "2026-11-01"}}


class SyncExpiredResponse(BaseModel):
    updated_count: int


class ExpiringMembershipRead(BaseModel):
    id: int
    member_id: int
    member_name: str
    plan_name: Optional[str] = None
    end_date: date
    status: MembershipStatus
    days_remaining: int


class ExpiringMembershipListResponse(BaseModel):
    memberships: List[ExpiringMembershipRead]
    total: int
