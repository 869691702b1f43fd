from datetime import datetime

import sqlmodel

from pokedle.utils.misc import get_utc_now

from ._base import BaseModel


class PokedexEntry(BaseModel, table=True):
    __tablename__: str = "pokedex_entries"
    __table_args__ = (
        sqlmodel.UniqueConstraint("user_id", "card_id", name="uq_pokedex_user_card"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    user_id: int = sqlmodel.Field(foreign_key="users.id", index=True)
    card_id: int = sqlmodel.Field(foreign_key="cards.id", index=True)
    discovered_at: datetime = sqlmodel.Field(
        default_factory=get_utc_now, sa_type=sqlmodel.DateTime(timezone=True)
    )
