"""Front Desk Memberships Router - freeze, unfreeze, expiry sweep"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_session
from app.core.dependencies import GymContext, get_gym_context
from app.core.limits import limiter
from app.desk.crud.memberships import (
    freeze_membership,
    get_expiring_memberships,
    sync_expired_memberships,
    unfreeze_membership,
)
from app.desk.schemas.memberships import (
    ExpiringMembershipListResponse,
    FreezeMembershipRequest,
    MembershipRead,
    SyncExpiredResponse,
)

router = APIRouter(prefix="/desk/memberships", tags=["Desk Memberships"])


@router.post("/{membership_id}/freeze", response_model=MembershipRead)
@limiter.limit("30/minute")
async def freeze(
    request: Request,
    membership_id: int,
    freeze_data: FreezeMembershipRequest,
    gym: GymContext = Depends(get_gym_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Pause an active membership until the planned resume date.

    The end date is not touched here; it is extended on unfreeze by the days
    actually spent frozen.
    """
    return await freeze_membership(
        db, gym.gym_id, membership_id, freeze_data.planned_resume_date, clock.now()
    )


@router.post("/{membership_id}/unfreeze", response_model=MembershipRead)
@limiter.limit("30/minute")
async def unfreeze(
    request: Request,
    membership_id: int,
    gym: GymContext = Depends(get_gym_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Resume a frozen membership, shifting its end date."""
    return await unfreeze_membership(db, gym.gym_id, membership_id, clock.now())


@router.post("/sync-expired", response_model=SyncExpiredResponse)
@limiter.limit("10/minute")
async def sync_expired(
    request: Request,
    gym: GymContext = Depends(get_gym_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Mark lapsed active memberships as expired. Safe to call repeatedly."""
    updated_count = await sync_expired_memberships(db, gym.gym_id, clock.now())
    return SyncExpiredResponse(updated_count=updated_count)


@router.get("/expiring", response_model=ExpiringMembershipListResponse)
@limiter.limit("30/minute")
async def list_expiring(
    request: Request,
    within_days: Optional[int] = Query(None, ge=0, le=90, description="Days ahead to look"),
    gym: GymContext = Depends(get_gym_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Memberships ending soon and already expired ones."""
    if within_days is None:
        memberships = await get_expiring_memberships(db, gym.gym_id, clock.now())
    else:
        memberships = await get_expiring_memberships(db, gym.gym_id, clock.now(), within_days)

    return ExpiringMembershipListResponse(memberships=memberships, total=len(memberships))
