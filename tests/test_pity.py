import random
from datetime import UTC, datetime

import pytest
from conftest import ExplodingRandom, FixedRandom
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.enums import EventType
from pokedle.models.event_log import EventLog
from pokedle.models.pity_tracker import PityTracker
from pokedle.models.user import User
from pokedle.schemas.pity import PityState
from pokedle.services.pity import (
    HARD_PITY_THRESHOLD,
    PityService,
    apply_game_result,
    calculate_pity_modifiers,
    reset_pity_state,
)

NOW = datetime(2024, 1, 1, tzinfo=UTC)


def play(state: PityState, tier: int, *, ceiling: bool = False) -> PityState:
    return apply_game_result(state, tier=tier, pulled_ceiling=ceiling, now=NOW)


def test_streaks_are_exclusive() -> None:
    rng = random.Random(99)
    state = PityState()
    for _ in range(500):
        state = play(state, rng.randint(1, 6), ceiling=rng.random() < 0.1)
        assert state.consecutive_tier6 == 0 or state.consecutive_tier5 == 0


def test_tier_streak_transitions() -> None:
    state = play(play(PityState(), 6), 6)
    assert (state.consecutive_tier6, state.consecutive_tier5) == (2, 0)

    state = play(state, 5)
    assert (state.consecutive_tier6, state.consecutive_tier5) == (0, 1)

    state = play(state, 3)
    assert (state.consecutive_tier6, state.consecutive_tier5) == (0, 0)
    assert state.total_games == 4


def test_ceiling_pull_resets_drought() -> None:
    state = play(play(PityState(), 4), 4)
    assert state.games_without_ceiling == 2
    assert state.hard_pity_counter == 2
    assert state.last_ceiling_pull is None

    state = play(state, 4, ceiling=True)

    assert state.games_without_ceiling == 0
    assert state.hard_pity_counter == 0
    assert state.last_ceiling_pull == NOW


def test_input_state_is_not_mutated() -> None:
    state = PityState(consecutive_tier6=1)
    play(state, 6)
    assert state.consecutive_tier6 == 1


def test_ten_games_without_ceiling_trigger_hard_pity() -> None:
    state = PityState()
    for _ in range(HARD_PITY_THRESHOLD):
        state = play(state, 6)

    modifiers = calculate_pity_modifiers(state, ExplodingRandom())

    assert modifiers.guarantee_ceiling
    assert modifiers.ceiling_weight_multiplier == 1.0
    assert not modifiers.tier_boost


def test_no_pity_on_fresh_state() -> None:
    modifiers = calculate_pity_modifiers(PityState(), ExplodingRandom())

    assert modifiers.ceiling_weight_multiplier == 1.0
    assert not modifiers.guarantee_ceiling
    assert not modifiers.tier_boost


def test_minor_soft_pity() -> None:
    state = PityState(consecutive_tier6=2, games_without_ceiling=2, hard_pity_counter=2)

    modifiers = calculate_pity_modifiers(state, ExplodingRandom())

    assert modifiers.ceiling_weight_multiplier == 1.5
    assert not modifiers.tier_boost


@pytest.mark.parametrize(("roll", "boosted"), [(0.1, True), (0.5, False)])
def test_major_soft_pity_rolls_tier_boost(roll: float, boosted: bool) -> None:
    state = PityState(consecutive_tier6=3, games_without_ceiling=3, hard_pity_counter=3)

    modifiers = calculate_pity_modifiers(state, FixedRandom(roll))

    assert modifiers.ceiling_weight_multiplier == 2.5
    assert modifiers.tier_boost is boosted


@pytest.mark.parametrize(("drought", "multiplier"), [(4, 1.0), (5, 1.3), (6, 1.3), (7, 2.0)])
def test_drought_multiplier(drought: int, multiplier: float) -> None:
    state = PityState(games_without_ceiling=drought, hard_pity_counter=drought)

    modifiers = calculate_pity_modifiers(state, ExplodingRandom())

    assert modifiers.ceiling_weight_multiplier == multiplier


def test_drought_multiplier_never_lowers_streak_multiplier() -> None:
    state = PityState(consecutive_tier6=4, games_without_ceiling=5, hard_pity_counter=5)
    modifiers = calculate_pity_modifiers(state, FixedRandom(0.9))
    assert modifiers.ceiling_weight_multiplier == 2.5

    state = PityState(consecutive_tier6=2, games_without_ceiling=7, hard_pity_counter=7)
    modifiers = calculate_pity_modifiers(state, ExplodingRandom())
    assert modifiers.ceiling_weight_multiplier == 2.0


def test_reset_keeps_total_games() -> None:
    state = PityState(
        consecutive_tier6=3,
        games_without_ceiling=8,
        hard_pity_counter=8,
        total_games=12,
        last_ceiling_pull=NOW,
    )

    assert reset_pity_state(state) == PityState(total_games=12)


@pytest.mark.asyncio()
async def test_tracker_is_created_lazily(db: AsyncSession, user: User) -> None:
    service = PityService(db, random.Random(0))

    status = await service.get_pity_status(user.id)

    assert status.state == PityState()
    assert status.games_until_hard_pity == HARD_PITY_THRESHOLD
    trackers = (await db.exec(select(PityTracker))).all()
    assert [tracker.user_id for tracker in trackers] == [user.id]


@pytest.mark.asyncio()
async def test_record_game_is_staged_until_commit(db: AsyncSession, user: User) -> None:
    service = PityService(db, random.Random(0))
    # the rollback below expires the fixture instance
    user_id = user.id

    await service.record_game(user_id, tier=6, pulled_ceiling=False)
    await service.record_game(user_id, tier=6, pulled_ceiling=False)
    await db.commit()

    state = await service.get_pity_state(user_id)
    assert state.consecutive_tier6 == 2
    assert state.hard_pity_counter == 2
    assert state.total_games == 2

    await service.record_game(user_id, tier=6, pulled_ceiling=False)
    await db.rollback()

    assert (await service.get_pity_state(user_id)).total_games == 2


@pytest.mark.asyncio()
async def test_reset_pity_logs_event(db: AsyncSession, user: User) -> None:
    service = PityService(db, random.Random(0))
    for _ in range(3):
        await service.record_game(user.id, tier=6, pulled_ceiling=False)
    await db.commit()

    state = await service.reset_pity(user.id, reason="support ticket")

    assert state == PityState(total_games=3)
    assert await service.get_pity_state(user.id) == PityState(total_games=3)
    events = (await db.exec(select(EventLog))).all()
    assert [event.event_type for event in events] == [EventType.PITY_RESET]
    assert events[0].context == {"reason": "support ticket"}


def test_modifiers_without_random_source_skip_tier_boost() -> None:
    state = PityState(consecutive_tier6=3, games_without_ceiling=3, hard_pity_counter=3)

    modifiers = calculate_pity_modifiers(state, None)

    assert modifiers.ceiling_weight_multiplier == 2.5
    assert not modifiers.tier_boost


@pytest.mark.asyncio()
async def test_pity_status_reports_boost_chance_without_drawing(
    db: AsyncSession, user: User
) -> None:
    db.add(
        PityTracker(
            user_id=user.id, consecutive_tier6=3, games_without_ceiling=3, hard_pity_counter=3
        )
    )
    await db.commit()
    service = PityService(db, ExplodingRandom())

    first = await service.get_pity_status(user.id)
    second = await service.get_pity_status(user.id)

    assert first == second
    assert first.modifiers.ceiling_weight_multiplier == 2.5
    assert not first.modifiers.tier_boost
    assert first.tier_boost_chance == 0.2


class LateTrackerPityService(PityService):
    """Misses the tracker on the first lookup, as if another request created it meanwhile."""

    def __init__(self, db: AsyncSession, rng: random.Random) -> None:
        super().__init__(db, rng)
        self.lookups = 0

    async def _find_tracker(self, user_id: int, *, for_update: bool = False) -> PityTracker | None:
        self.lookups += 1
        if self.lookups == 1:
            return None
        return await super()._find_tracker(user_id, for_update=for_update)


@pytest.mark.asyncio()
async def test_tracker_created_concurrently_is_reused(db: AsyncSession, user: User) -> None:
    user_id = user.id
    db.add(PityTracker(user_id=user_id, hard_pity_counter=4, total_games=4))
    await db.commit()
    service = LateTrackerPityService(db, random.Random(0))

    state = await service.get_pity_state(user_id)

    assert service.lookups == 2
    assert state.hard_pity_counter == 4
    trackers = (await db.exec(select(PityTracker))).all()
    assert [tracker.user_id for tracker in trackers] == [user_id]
