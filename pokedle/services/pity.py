import random
from datetime import datetime
from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.db import get_db
from pokedle.core.enums import EventType
from pokedle.core.rng import get_rng
from pokedle.models.event_log import EventLog
from pokedle.models.pity_tracker import PityTracker
from pokedle.schemas.pity import PityModifiers, PityState, PityStatusResponse
from pokedle.utils.misc import get_utc_now

HARD_PITY_THRESHOLD = 10
"""Games without a ceiling capture after which a ceiling card is guaranteed"""

MAJOR_SOFT_PITY_STREAK = 3
MAJOR_SOFT_PITY_MULTIPLIER = 2.5
TIER_BOOST_CHANCE = 0.2
MINOR_SOFT_PITY_STREAK = 2
MINOR_SOFT_PITY_MULTIPLIER = 1.5

# (games without ceiling, multiplier floor), checked in order
DROUGHT_MULTIPLIERS: tuple[tuple[int, float], ...] = ((7, 2.0), (5, 1.3))


def apply_game_result(
    state: PityState, *, tier: int, pulled_ceiling: bool, now: datetime
) -> PityState:
    """Return the pity state after one completed game.

    Tier 6 and tier 5 streaks are exclusive: extending one resets the other and
    any better tier resets both.
    """
    consecutive_tier6 = state.consecutive_tier6
    consecutive_tier5 = state.consecutive_tier5
    if tier == 6:  # noqa: PLR2004
        consecutive_tier6, consecutive_tier5 = consecutive_tier6 + 1, 0
    elif tier == 5:  # noqa: PLR2004
        consecutive_tier6, consecutive_tier5 = 0, consecutive_tier5 + 1
    else:
        consecutive_tier6, consecutive_tier5 = 0, 0

    if pulled_ceiling:
        games_without_ceiling = 0
        hard_pity_counter = 0
        last_ceiling_pull = now
    else:
        games_without_ceiling = state.games_without_ceiling + 1
        hard_pity_counter = state.hard_pity_counter + 1
        last_ceiling_pull = state.last_ceiling_pull

    return PityState(
        consecutive_tier6=consecutive_tier6,
        consecutive_tier5=consecutive_tier5,
        games_without_ceiling=games_without_ceiling,
        hard_pity_counter=hard_pity_counter,
        total_games=state.total_games + 1,
        last_ceiling_pull=last_ceiling_pull,
    )


def reset_pity_state(state: PityState) -> PityState:
    """Zero every counter except ``total_games``."""
    return PityState(total_games=state.total_games)


def calculate_pity_modifiers(state: PityState, rng: random.Random | None) -> PityModifiers:
    """Derive card selection modifiers from the current pity state.

    Hard pity overrides every soft modifier. The tier boost coin flip is only
    drawn when the major soft pity streak is reached, and never without ``rng``.
    """
    if state.hard_pity_counter >= HARD_PITY_THRESHOLD:
        return PityModifiers(guarantee_ceiling=True)

    multiplier = 1.0
    tier_boost = False
    if state.consecutive_tier6 >= MAJOR_SOFT_PITY_STREAK:
        multiplier = MAJOR_SOFT_PITY_MULTIPLIER
        tier_boost = rng is not None and rng.random() < TIER_BOOST_CHANCE
    elif state.consecutive_tier6 == MINOR_SOFT_PITY_STREAK:
        multiplier = MINOR_SOFT_PITY_MULTIPLIER

    for drought, floor in DROUGHT_MULTIPLIERS:
        if state.games_without_ceiling >= drought:
            multiplier = max(multiplier, floor)
            break

    return PityModifiers(ceiling_weight_multiplier=multiplier, tier_boost=tier_boost)


def tier_boost_chance(state: PityState) -> float:
    if state.hard_pity_counter >= HARD_PITY_THRESHOLD:
        return 0.0
    return TIER_BOOST_CHANCE if state.consecutive_tier6 >= MAJOR_SOFT_PITY_STREAK else 0.0


def _write_state(tracker: PityTracker, state: PityState) -> None:
    tracker.sqlmodel_update(state.model_dump())
    tracker.updated_at = get_utc_now()


class PityService:
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db)],
        rng: Annotated[random.Random, Depends(get_rng)],
    ) -> None:
        self.db = db
        self.rng = rng

    async def _find_tracker(self, user_id: int, *, for_update: bool = False) -> PityTracker | None:
        query = select(PityTracker).where(PityTracker.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.exec(query)
        return result.first()

    async def get_or_create_tracker(self, user_id: int, *, for_update: bool = False) -> PityTracker:
        """Get or create the pity tracker of a user.

        A new tracker is inserted in a savepoint of the caller's transaction. If a
        concurrent request created it first, that row is returned instead.
        """
        tracker = await self._find_tracker(user_id, for_update=for_update)
        if tracker:
            return tracker

        try:
            async with self.db.begin_nested():
                tracker = PityTracker(user_id=user_id)
                self.db.add(tracker)
        except IntegrityError:
            logger.debug(f"Pity tracker of user {user_id} was created concurrently")
            tracker = await self._find_tracker(user_id, for_update=for_update)
            if not tracker:
                raise

        return tracker

    async def get_pity_state(self, user_id: int) -> PityState:
        tracker = await self.get_or_create_tracker(user_id)
        return PityState.model_validate(tracker)

    async def get_pity_modifiers(self, user_id: int) -> PityModifiers:
        return calculate_pity_modifiers(await self.get_pity_state(user_id), self.rng)

    async def get_pity_status(self, user_id: int) -> PityStatusResponse:
        state = await self.get_pity_state(user_id)
        await self.db.commit()
        return PityStatusResponse(
            state=state,
            modifiers=calculate_pity_modifiers(state, None),
            tier_boost_chance=tier_boost_chance(state),
            games_until_hard_pity=max(0, HARD_PITY_THRESHOLD - state.hard_pity_counter),
        )

    async def record_game(self, user_id: int, *, tier: int, pulled_ceiling: bool) -> PityState:
        """Apply the transition for one completed game.

        The change is staged on the session; the caller commits it together with
        the capture that triggered it.
        """
        tracker = await self.get_or_create_tracker(user_id, for_update=True)
        state = apply_game_result(
            PityState.model_validate(tracker),
            tier=tier,
            pulled_ceiling=pulled_ceiling,
            now=get_utc_now(),
        )
        _write_state(tracker, state)
        self.db.add(tracker)

        logger.info(
            f"Pity updated for user {user_id}: tier={tier}, ceiling={pulled_ceiling}, "
            f"hard_pity={state.hard_pity_counter}, tier6_streak={state.consecutive_tier6}"
        )
        return state

    async def reset_pity(self, user_id: int, *, reason: str | None = None) -> PityState:
        """Zero a user's pity counters, keeping their total games (admin only)."""
        tracker = await self.get_or_create_tracker(user_id, for_update=True)
        state = reset_pity_state(PityState.model_validate(tracker))
        _write_state(tracker, state)
        self.db.add(tracker)

        self.db.add(
            EventLog(user_id=user_id, event_type=EventType.PITY_RESET, context={"reason": reason})
        )

        await self.db.commit()
        logger.info(f"Pity reset for user {user_id}")
        return state
