from datetime import datetime

import sqlmodel

from pokedle.utils.misc import get_utc_now

from ._base import BaseModel


class UserCard(BaseModel, table=True):
    """A card captured by a user, at most one per game."""

    __tablename__: str = "user_cards"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    user_id: int = sqlmodel.Field(foreign_key="users.id", index=True)
    card_id: int = sqlmodel.Field(foreign_key="cards.id", index=True)
    game_id: int = sqlmodel.Field(foreign_key="games.id", unique=True)
    obtained_at: datetime = sqlmodel.Field(
        default_factory=get_utc_now, sa_type=sqlmodel.DateTime(timezone=True)
    )
