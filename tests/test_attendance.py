import pytest
from sqlalchemy import func, select

from app.core.exceptions import UnauthorizedError
from app.portal.crud.attendance import self_check_in
from app.portal.models import Attendance
from tests.factories import create_active_member, create_gym, create_member


async def _count(session, member_id):
    result = await session.execute(
        select(func.count()).select_from(Attendance).where(Attendance.member_id == member_id)
    )
    return result.scalar()


@pytest.mark.asyncio
async def test_check_in_records_attendance(session, today, clock):
    gym = await create_gym(session)
    member = await create_active_member(session, gym, today)

    result = await self_check_in(session, gym.id, member.id, clock.now())

    assert result.success
    assert result.attendance_id is not None
    assert result.checked_in_at == clock.now()
    assert await _count(session, member.id) == 1


@pytest.mark.asyncio
async def test_second_check_in_within_the_hour_is_refused(session, today, clock):
    gym = await create_gym(session)
    member = await create_active_member(session, gym, today)

    first = await self_check_in(session, gym.id, member.id, clock.now())
    clock.advance(minutes=45)
    second = await self_check_in(session, gym.id, member.id, clock.now())

    assert not second.success
    assert second.attendance_id == first.attendance_id
    assert await _count(session, member.id) == 1


@pytest.mark.asyncio
async def test_check_in_after_the_window_is_recorded(session, today, clock):
    gym = await create_gym(session)
    member = await create_active_member(session, gym, today)

    await self_check_in(session, gym.id, member.id, clock.now())
    clock.advance(minutes=61)
    later = await self_check_in(session, gym.id, member.id, clock.now())

    assert later.success
    assert await _count(session, member.id) == 2


@pytest.mark.asyncio
async def test_check_in_without_membership_is_unauthorized(session, clock):
    gym = await create_gym(session)
    member = await create_member(session, gym)

    with pytest.raises(UnauthorizedError):
        await self_check_in(session, gym.id, member.id, clock.now())

    assert await _count(session, member.id) == 0


@pytest.mark.asyncio
async def test_check_in_dedup_window_can_be_disabled(session, today, clock):
    gym = await create_gym(session)
    member = await create_active_member(session, gym, today, days_left=5)

    await self_check_in(session, gym.id, member.id, clock.now(), dedup_minutes=0)
    clock.advance(seconds=1)
    again = await self_check_in(session, gym.id, member.id, clock.now(), dedup_minutes=0)

    assert again.success
