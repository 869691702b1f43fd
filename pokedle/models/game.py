import sqlmodel

from pokedle.core.enums import TimeOfDay

from ._base import BaseModel


class Game(BaseModel, table=True):
    __tablename__: str = "games"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    user_id: int = sqlmodel.Field(foreign_key="users.id", index=True)
    biome_id: int = sqlmodel.Field(foreign_key="biomes.id")
    time_of_day: TimeOfDay
    pokemon_id: int = sqlmodel.Field(foreign_key="pokemon.id", index=True)
    """The answer, withheld from the player until the game is completed"""
    guesses_used: int | None = sqlmodel.Field(default=None, nullable=True)
    tier: int | None = sqlmodel.Field(default=None, nullable=True, ge=1, le=6)
    completed: bool = sqlmodel.Field(default=False, index=True)
    won: bool = False
    offered_card_ids: list[int] | None = sqlmodel.Field(
        default=None, sa_column=sqlmodel.Column(sqlmodel.JSON, nullable=True)
    )
    """Offered cards in offer order, index 0 is the answer's card"""
