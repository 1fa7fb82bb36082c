from datetime import timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import InvalidStateError, NotFoundError
from app.desk.crud.memberships import freeze_membership, unfreeze_membership
from app.desk.schemas.memberships import (
    ActiveState,
    ExpiredState,
    FrozenState,
    MembershipStatus,
)
from app.desk.services.freeze_controller import FreezeController, resumed_end_date
from tests.conftest import NOW
from tests.factories import create_gym, create_member, create_membership


async def _active_membership(session, today, gym=None):
    gym = gym or await create_gym(session)
    member = await create_member(session, gym)
    membership = await create_membership(
        session, member, today - timedelta(days=10), today + timedelta(days=20)
    )
    return gym, membership


def test_resumed_end_date_adds_whole_days_only():
    end = NOW.date() + timedelta(days=20)
    assert resumed_end_date(end, NOW, NOW + timedelta(days=4, hours=23)) == end + timedelta(days=4)
    assert resumed_end_date(end, NOW, NOW + timedelta(hours=5)) == end


def test_resumed_end_date_never_shrinks_window():
    end = NOW.date()
    assert resumed_end_date(end, NOW, NOW - timedelta(days=2)) == end


@pytest.mark.asyncio
async def test_freeze_then_unfreeze_extends_by_elapsed_days(session, today, clock):
    gym, membership = await _active_membership(session, today)
    original_end = membership.end_date
    controller = FreezeController(session)

    frozen = await controller.freeze(gym.id, membership.id, today + timedelta(days=10), clock.now())
    assert frozen.status == MembershipStatus.frozen
    assert frozen.end_date == original_end
    assert isinstance(frozen.state, FrozenState)
    assert frozen.state.planned_resume_date == today + timedelta(days=10)
    assert frozen.version == 2

    clock.advance(days=4)
    resumed = await controller.unfreeze(gym.id, membership.id, clock.now())

    assert resumed.status == MembershipStatus.active
    assert resumed.end_date == original_end + timedelta(days=4)
    assert resumed.frozen_at is None
    assert resumed.frozen_until_planned is None
    assert isinstance(resumed.state, ActiveState)
    assert resumed.version == 3


@pytest.mark.asyncio
async def test_early_unfreeze_uses_actual_not_planned_days(session, today, clock):
    gym, membership = await _active_membership(session, today)
    original_end = membership.end_date
    controller = FreezeController(session)

    await controller.freeze(gym.id, membership.id, today + timedelta(days=30), clock.now())
    clock.advance(days=2, hours=3)
    resumed = await controller.unfreeze(gym.id, membership.id, clock.now())

    assert resumed.end_date == original_end + timedelta(days=2)


@pytest.mark.asyncio
async def test_freeze_requires_future_resume_date(session, today, clock):
    gym, membership = await _active_membership(session, today)

    with pytest.raises(InvalidStateError) as exc_info:
        await FreezeController(session).freeze(gym.id, membership.id, today, clock.now())

    assert exc_info.value.message == "Resume date must be in the future"


@pytest.mark.asyncio
async def test_cannot_freeze_frozen_membership(session, today, clock):
    gym, membership = await _active_membership(session, today)
    controller = FreezeController(session)
    await controller.freeze(gym.id, membership.id, today + timedelta(days=5), clock.now())

    with pytest.raises(InvalidStateError) as exc_info:
        await controller.freeze(gym.id, membership.id, today + timedelta(days=7), clock.now())

    assert exc_info.value.message == "Cannot freeze a non-active membership"


@pytest.mark.asyncio
async def test_cannot_freeze_lapsed_membership_before_sweep(session, today, clock):
    gym = await create_gym(session)
    member = await create_member(session, gym)
    lapsed = await create_membership(
        session, member, today - timedelta(days=31), today - timedelta(days=1)
    )

    with pytest.raises(InvalidStateError):
        await FreezeController(session).freeze(
            gym.id, lapsed.id, today + timedelta(days=5), clock.now()
        )


@pytest.mark.asyncio
async def test_unfreeze_requires_frozen_membership(session, today, clock):
    gym, membership = await _active_membership(session, today)

    with pytest.raises(InvalidStateError) as exc_info:
        await FreezeController(session).unfreeze(gym.id, membership.id, clock.now())

    assert exc_info.value.message == "Membership is not frozen"


@pytest.mark.asyncio
async def test_unfreeze_expired_membership_is_rejected(session, today, clock):
    gym = await create_gym(session)
    member = await create_member(session, gym)
    expired = await create_membership(
        session, member, today - timedelta(days=31), today - timedelta(days=1), ExpiredState()
    )

    with pytest.raises(InvalidStateError):
        await FreezeController(session).unfreeze(gym.id, expired.id, clock.now())


@pytest.mark.asyncio
async def test_membership_of_another_gym_is_not_found(session, today, clock):
    _, membership = await _active_membership(session, today)
    other_gym = await create_gym(session, "Uptown Gym")

    with pytest.raises(NotFoundError):
        await FreezeController(session).freeze(
            other_gym.id, membership.id, today + timedelta(days=5), clock.now()
        )


@pytest.mark.asyncio
async def test_stale_read_loses_to_concurrent_transition(session_factory, today, clock):
    async with session_factory() as setup:
        gym, membership = await _active_membership(setup, today)
        gym_id, membership_id = gym.id, membership.id

    async with session_factory() as first, session_factory() as second:
        stale = FreezeController(first)
        # The session only keeps weak references; hold the loaded row
        held = await stale._get_membership(gym_id, membership_id)
        await first.commit()

        await FreezeController(second).freeze(
            gym_id, membership_id, today + timedelta(days=5), clock.now()
        )
        await second.commit()
        assert held.version == 1
        assert held.status == MembershipStatus.active

        with pytest.raises(InvalidStateError) as exc_info:
            await stale.freeze(gym_id, membership_id, today + timedelta(days=9), clock.now())

    assert exc_info.value.message == "Membership was changed by another request"


@pytest.mark.asyncio
async def test_store_rejects_frozen_marker_on_active_row(session, today):
    _, membership = await _active_membership(session, today)

    with pytest.raises(IntegrityError):
        await session.execute(
            text("UPDATE memberships SET frozen_at = :ts WHERE id = :id"),
            {"ts": "2026-10-21 09:00:00", "id": membership.id},
        )
    await session.rollback()


@pytest.mark.asyncio
async def test_crud_wrappers_return_read_models(session, today, clock):
    gym, membership = await _active_membership(session, today)
    original_end = membership.end_date

    frozen = await freeze_membership(
        session, gym.id, membership.id, today + timedelta(days=3), clock.now()
    )
    assert frozen.status == MembershipStatus.frozen
    assert frozen.effective_status == MembershipStatus.frozen
    assert frozen.days_remaining is None
    assert frozen.state.status == MembershipStatus.frozen

    clock.advance(days=3)
    resumed = await unfreeze_membership(session, gym.id, membership.id, clock.now())
    assert resumed.effective_status == MembershipStatus.active
    assert resumed.end_date == original_end + timedelta(days=3)
    assert resumed.days_remaining == (resumed.end_date - (today + timedelta(days=3))).days
