from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PityState(BaseModel):
    """Immutable snapshot of a user's pity counters.

    At most one of ``consecutive_tier6`` and ``consecutive_tier5`` is nonzero.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    consecutive_tier6: int = 0
    consecutive_tier5: int = 0
    games_without_ceiling: int = 0
    hard_pity_counter: int = 0
    total_games: int = 0
    last_ceiling_pull: datetime | None = None


class PityModifiers(BaseModel):
    """Card selection modifiers derived from a pity state."""

    model_config = ConfigDict(frozen=True)

    ceiling_weight_multiplier: float = 1.0
    guarantee_ceiling: bool = False
    tier_boost: bool = False


class AppliedPity(BaseModel):
    """Pity effects reported alongside a card offer."""

    ceiling_boost: float
    tier_boost: bool
    hard_pity: bool


class PityStatusResponse(BaseModel):
    state: PityState
    modifiers: PityModifiers = Field(
        description="Modifiers the next offer gets, without rolling the tier boost"
    )
    tier_boost_chance: float = Field(
        default=0.0, description="Chance that the next offer is moved one tier up"
    )
    games_until_hard_pity: int


class PityReset(BaseModel):
    reason: str | None = Field(default=None, max_length=255, description="Reason for the reset")
