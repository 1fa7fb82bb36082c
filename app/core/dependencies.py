"""
Request context dependencies.

Authentication happens upstream; the gateway forwards the validated gym
(tenant) and, for portal calls, the member as headers.
"""
from dataclasses import dataclass

from fastapi import Depends, Header


@dataclass(frozen=True)
class GymContext:
    gym_id: int


@dataclass(frozen=True)
class MemberContext:
    gym_id: int
    member_id: int


async def get_gym_context(
    x_gym_id: int = Header(..., gt=0, description="Validated gym (tenant) id"),
) -> GymContext:
    """Dependency для staff (front desk) запросов"""
    return GymContext(gym_id=x_gym_id)


async def get_member_context(
    gym: GymContext = Depends(get_gym_context),
    x_member_id: int = Header(..., gt=0, description="Validated member id"),
) -> MemberContext:
    """Dependency для запросов портала участника"""
    return MemberContext(gym_id=gym.gym_id, member_id=x_member_id)
