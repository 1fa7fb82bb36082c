"""Portal Memberships Router"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_session
from app.core.dependencies import MemberContext, get_member_context
from app.core.limits import limiter
from app.desk.crud.memberships import get_member_current_membership
from app.desk.schemas.memberships import MembershipRead

router = APIRouter(prefix="/portal/memberships", tags=["Portal Memberships"])


@router.get("/current", response_model=MembershipRead)
@limiter.limit("60/minute")
async def get_current_membership(
    request: Request,
    member: MemberContext = Depends(get_member_context),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Current membership with its effective status and days remaining."""
    return await get_member_current_membership(
        db, member.gym_id, member.member_id, clock.now()
    )
