import random
from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.db import get_db
from pokedle.core.enums import TimeOfDay
from pokedle.core.exceptions import PoolExhaustionError
from pokedle.core.rng import get_rng
from pokedle.models.card import Card
from pokedle.models.pokemon import Pokemon
from pokedle.models.pokemon_spawn import PokemonSpawn
from pokedle.utils.selection import PoolProvider, first_non_empty, weighted_choice


def _matching_times(time_of_day: TimeOfDay) -> list[TimeOfDay]:
    return [time_of_day, TimeOfDay.BOTH]


class SpawnService:
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db)],
        rng: Annotated[random.Random, Depends(get_rng)],
    ) -> None:
        self.db = db
        self.rng = rng

    async def get_available_pokemon(
        self, biome_id: int, time_of_day: TimeOfDay
    ) -> Sequence[Pokemon]:
        """Pokemon spawn-configured for a biome at ``time_of_day`` (or at both times)."""
        result = await self.db.exec(
            select(Pokemon)
            .join(PokemonSpawn, col(PokemonSpawn.pokemon_id) == col(Pokemon.id))
            .where(
                PokemonSpawn.biome_id == biome_id,
                col(PokemonSpawn.time_of_day).in_(_matching_times(time_of_day)),
            )
            .distinct()
            .order_by(col(Pokemon.pokedex_number))
        )
        return result.all()

    async def _spawns_with_cards(
        self, biome_id: int, times: Sequence[TimeOfDay] | None = None
    ) -> Sequence[PokemonSpawn]:
        query = select(PokemonSpawn).where(
            PokemonSpawn.biome_id == biome_id,
            col(PokemonSpawn.pokemon_id).in_(select(Card.pokemon_id)),
        )
        if times is not None:
            query = query.where(col(PokemonSpawn.time_of_day).in_(times))
        result = await self.db.exec(query.order_by(col(PokemonSpawn.id)))
        return result.all()

    async def select_random_pokemon(self, biome_id: int, time_of_day: TimeOfDay) -> int:
        """Pick the answer pokemon for a new game in a biome.

        Only pokemon with at least one card are eligible. When nothing spawns at
        ``time_of_day`` (e.g. a night-only biome at day) any spawn of the biome is used.

        Raises:
            PoolExhaustionError: If no pokemon with cards spawns in the biome at all.
        """
        providers: list[PoolProvider[PokemonSpawn]] = [
            lambda: self._spawns_with_cards(biome_id, _matching_times(time_of_day)),
            lambda: self._spawns_with_cards(biome_id),
        ]
        spawns, level = await first_non_empty(providers)
        if not spawns:
            logger.error(f"No pokemon with cards available for biome {biome_id}")
            raise PoolExhaustionError(
                f"No pokemon with cards available for biome {biome_id}. "
                "Try another biome or time of day."
            )
        if level > 0:
            logger.info(f"No {time_of_day} spawns in biome {biome_id}, using any time of day")

        weights = [spawn.spawn_weight for spawn in spawns]
        return weighted_choice(spawns, self.rng, weights).pokemon_id
