import sqlmodel

from pokedle.core.enums import TimeOfDay

from ._base import BaseModel


class PokemonSpawn(BaseModel, table=True):
    """Which pokemon can be the answer in a biome, and at what time of day."""

    __tablename__: str = "pokemon_spawns"
    __table_args__ = (
        sqlmodel.UniqueConstraint(
            "pokemon_id", "biome_id", "time_of_day", name="uq_spawn_pokemon_biome_time"
        ),
        sqlmodel.Index("ix_spawn_biome_time", "biome_id", "time_of_day"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    pokemon_id: int = sqlmodel.Field(foreign_key="pokemon.id", index=True)
    biome_id: int = sqlmodel.Field(foreign_key="biomes.id")
    time_of_day: TimeOfDay
    spawn_weight: float = sqlmodel.Field(default=1.0, ge=0.0)
