"""Row builders for tests. Every helper commits so no transaction is left open."""
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.desk.models import ClassTemplate, Gym, Member, Membership, Plan
from app.desk.schemas.memberships import (
    ActiveState,
    FrozenState,
    MembershipState,
    state_columns,
)


async def create_gym(session: AsyncSession, name: str = "Downtown Gym") -> Gym:
    gym = Gym(name=name, is_active=True)
    session.add(gym)
    await session.commit()
    return gym


async def create_member(session: AsyncSession, gym: Gym, name: str = "Ana Torres") -> Member:
    member = Member(gym_id=gym.id, name=name, email=None, phone=None, is_active=True)
    session.add(member)
    await session.commit()
    return member


async def create_plan(
    session: AsyncSession, gym: Gym, name: str = "Monthly", duration_days: int = 30
) -> Plan:
    plan = Plan(gym_id=gym.id, name=name, duration_days=duration_days, price=0, is_active=True)
    session.add(plan)
    await session.commit()
    return plan


async def create_membership(
    session: AsyncSession,
    member: Member,
    start_date: date,
    end_date: date,
    state: Optional[MembershipState] = None,
    plan: Optional[Plan] = None,
) -> Membership:
    membership = Membership(
        member_id=member.id,
        plan_id=plan.id if plan else None,
        start_date=start_date,
        end_date=end_date,
        version=1,
        notes=None,
        **state_columns(state or ActiveState()),
    )
    session.add(membership)
    await session.commit()
    return membership


async def create_frozen_membership(
    session: AsyncSession,
    member: Member,
    start_date: date,
    end_date: date,
    frozen_at: datetime,
    planned_resume_date: date,
) -> Membership:
    frozen = FrozenState(frozen_at=frozen_at, planned_resume_date=planned_resume_date)
    return await create_membership(session, member, start_date, end_date, frozen)


async def create_active_member(
    session: AsyncSession, gym: Gym, today: date, name: str = "Ana Torres", days_left: int = 20
) -> Member:
    """Member holding an ACTIVE membership that started ten days ago"""
    member = await create_member(session, gym, name)
    await create_membership(
        session, member, today - timedelta(days=10), today + timedelta(days=days_left)
    )
    return member


async def create_class(
    session: AsyncSession,
    gym: Gym,
    weekday: int,
    capacity: int = 10,
    name: str = "Spinning",
    start_time: time = time(18, 0),
    is_active: bool = True,
) -> ClassTemplate:
    template = ClassTemplate(
        gym_id=gym.id,
        name=name,
        instructor="Luis",
        weekday=weekday,
        start_time=start_time,
        end_time=time(start_time.hour + 1, start_time.minute),
        capacity=capacity,
        is_active=is_active,
    )
    session.add(template)
    await session.commit()
    return template
