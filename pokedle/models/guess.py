import sqlmodel

from ._base import BaseModel


class Guess(BaseModel, table=True):
    __tablename__: str = "guesses"
    __table_args__ = (
        sqlmodel.UniqueConstraint("game_id", "guess_num", name="uq_guess_game_num"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    game_id: int = sqlmodel.Field(foreign_key="games.id", index=True)
    guess_num: int = sqlmodel.Field(ge=1, le=6)
    pokemon_id: int = sqlmodel.Field(foreign_key="pokemon.id", index=True)
    feedback: dict = sqlmodel.Field(sa_column=sqlmodel.Column(sqlmodel.JSON))
