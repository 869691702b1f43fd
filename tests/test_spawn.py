import random

import pytest
from conftest import Catalog
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.enums import TimeOfDay
from pokedle.core.exceptions import PoolExhaustionError
from pokedle.models.biome import Biome
from pokedle.models.pokemon import Pokemon
from pokedle.models.pokemon_spawn import PokemonSpawn
from pokedle.services.spawn import SpawnService


@pytest.mark.asyncio()
async def test_available_pokemon_include_both_times(db: AsyncSession, catalog: Catalog) -> None:
    service = SpawnService(db, random.Random(0))
    grassland = catalog.biomes["Grassland"]

    day = await service.get_available_pokemon(grassland.id, TimeOfDay.DAY)
    night = await service.get_available_pokemon(grassland.id, TimeOfDay.NIGHT)

    assert [p.name for p in day] == ["bulbasaur", "charmander", "pidgey"]
    assert [p.name for p in night] == ["charmander", "squirtle"]


@pytest.mark.asyncio()
async def test_answer_matches_time_of_day(db: AsyncSession, catalog: Catalog) -> None:
    grassland = catalog.biomes["Grassland"]
    night_ids = {catalog.pokemon["charmander"].id, catalog.pokemon["squirtle"].id}

    for seed in range(20):
        service = SpawnService(db, random.Random(seed))
        assert await service.select_random_pokemon(grassland.id, TimeOfDay.NIGHT) in night_ids


@pytest.mark.asyncio()
async def test_night_only_biome_falls_back_at_day(db: AsyncSession, catalog: Catalog) -> None:
    service = SpawnService(db, random.Random(0))
    cemetery = catalog.biomes["Cemetery"]

    assert not await service.get_available_pokemon(cemetery.id, TimeOfDay.DAY)
    pokemon_id = await service.select_random_pokemon(cemetery.id, TimeOfDay.DAY)

    assert pokemon_id == catalog.pokemon["gastly"].id


@pytest.mark.asyncio()
async def test_biome_without_playable_pokemon_is_exhausted(
    db: AsyncSession, catalog: Catalog
) -> None:
    void = Biome(name="Distortion World")
    missingno = Pokemon(
        name="missingno",
        pokedex_number=999,
        type1="Bird",
        evolution_stage=1,
        fully_evolved=True,
        color="gray",
        generation=1,
    )
    db.add_all([void, missingno])
    await db.flush()
    db.add(PokemonSpawn(pokemon_id=missingno.id, biome_id=void.id, time_of_day=TimeOfDay.BOTH))
    await db.commit()

    with pytest.raises(PoolExhaustionError):
        await SpawnService(db, random.Random(0)).select_random_pokemon(void.id, TimeOfDay.DAY)


@pytest.mark.asyncio()
async def test_spawn_weight_biases_answer(db: AsyncSession, catalog: Catalog) -> None:
    service = SpawnService(db, random.Random(11))
    grassland = catalog.biomes["Grassland"]
    pidgey = catalog.pokemon["pidgey"].id

    picks = [await service.select_random_pokemon(grassland.id, TimeOfDay.DAY) for _ in range(300)]

    # pidgey has weight 3 against 1 + 1 for bulbasaur and charmander
    assert picks.count(pidgey) > len(picks) / 2
