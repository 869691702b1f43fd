from datetime import datetime

import sqlmodel

from pokedle.utils.misc import get_utc_now

from ._base import BaseModel


class PityTracker(BaseModel, table=True):
    """Track a user's streaks of poor outcomes for the card pity system."""

    __tablename__: str = "pity_trackers"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    user_id: int = sqlmodel.Field(foreign_key="users.id", unique=True, index=True)
    consecutive_tier6: int = sqlmodel.Field(default=0, ge=0)
    consecutive_tier5: int = sqlmodel.Field(default=0, ge=0)
    games_without_ceiling: int = sqlmodel.Field(default=0, ge=0)
    hard_pity_counter: int = sqlmodel.Field(default=0, ge=0)
    """Number of games since the last ceiling card was captured"""
    total_games: int = sqlmodel.Field(default=0, ge=0)
    last_ceiling_pull: datetime | None = sqlmodel.Field(
        default=None, nullable=True, sa_type=sqlmodel.DateTime(timezone=True)
    )
    updated_at: datetime = sqlmodel.Field(
        default_factory=get_utc_now, sa_type=sqlmodel.DateTime(timezone=True)
    )
