import random
from collections.abc import AsyncGenerator
from dataclasses import dataclass

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

import pokedle.models  # noqa: F401
from pokedle.core.enums import TimeOfDay
from pokedle.models.biome import Biome
from pokedle.models.pokemon import Pokemon
from pokedle.models.user import User
from pokedle.schemas.catalog import BiomeSeed, CardSeed, CatalogSeed, PokemonSeed, SpawnSeed
from pokedle.services.card_generator import CardGenerator
from pokedle.services.catalog import CatalogService
from pokedle.services.game import GameService
from pokedle.services.pity import PityService
from pokedle.services.spawn import SpawnService


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class ExplodingRandom(random.Random):
    def random(self) -> float:
        msg = "random() must not be called"
        raise AssertionError(msg)


def _pokemon(  # noqa: PLR0913, PLR0917
    name: str,
    number: int,
    type1: str,
    type2: str | None,
    stage: int,
    fully_evolved: bool,
    color: str,
) -> PokemonSeed:
    return PokemonSeed(
        name=name,
        pokedex_number=number,
        type1=type1,
        type2=type2,
        evolution_stage=stage,
        fully_evolved=fully_evolved,
        color=color,
        generation=1,
        image_url=f"https://img.example/{number}.png",
    )


def _card(tcgdex_id: str, pokemon: str, rarity: str) -> CardSeed:
    return CardSeed(
        tcgdex_id=tcgdex_id,
        pokemon=pokemon,
        rarity=rarity,
        set_id="sv1",
        set_name="Scarlet & Violet",
        image_url=f"https://cards.example/{tcgdex_id}.png",
    )


CATALOG_SEED = CatalogSeed(
    biomes=[
        BiomeSeed(name="Grassland", description="Open fields with tall grass"),
        BiomeSeed(name="Cemetery", description="Eerie graveyard shrouded in mist"),
    ],
    pokemon=[
        _pokemon("bulbasaur", 1, "Grass", "Poison", 1, False, "green"),
        _pokemon("charmander", 4, "Fire", None, 1, False, "red"),
        _pokemon("squirtle", 7, "Water", None, 1, False, "blue"),
        _pokemon("pidgey", 16, "Normal", "Flying", 1, False, "brown"),
        _pokemon("oddish", 43, "Grass", "Poison", 1, False, "blue"),
        _pokemon("gastly", 92, "Ghost", "Poison", 1, False, "purple"),
    ],
    spawns=[
        SpawnSeed(pokemon="bulbasaur", biome="Grassland", time_of_day=TimeOfDay.DAY),
        SpawnSeed(pokemon="charmander", biome="Grassland", time_of_day=TimeOfDay.BOTH),
        SpawnSeed(pokemon="pidgey", biome="Grassland", time_of_day=TimeOfDay.DAY, spawn_weight=3),
        SpawnSeed(pokemon="squirtle", biome="Grassland", time_of_day=TimeOfDay.NIGHT),
        SpawnSeed(pokemon="gastly", biome="Cemetery", time_of_day=TimeOfDay.NIGHT),
    ],
    cards=[
        _card("sv1-001", "bulbasaur", "Common"),  # tiers 5-6
        _card("sv1-166", "bulbasaur", "Illustration Rare"),  # tiers 1-4
        _card("sv1-004", "charmander", "Rare Holo"),  # tiers 3-6
        _card("sv1-005", "charmander", "Double Rare"),  # tiers 2-5
        _card("sv1-007", "squirtle", "Uncommon"),  # tiers 4-6
        _card("sv1-016", "pidgey", "Common"),  # tiers 5-6
        _card("sv1-170", "pidgey", "Illustration Rare"),  # tiers 1-4
        _card("sv1-240", "gastly", "Special Illustration Rare"),  # tiers 1-2
    ],
    # oddish has no printed card and gets placeholders in every tier
)


@dataclass
class Catalog:
    pokemon: dict[str, Pokemon]
    biomes: dict[str, Biome]


@pytest_asyncio.fixture()
async def engine() -> AsyncGenerator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    async with AsyncSession(
        engine, autocommit=False, autoflush=False, expire_on_commit=False
    ) as session:
        yield session


@pytest_asyncio.fixture()
async def catalog(db: AsyncSession) -> Catalog:
    await CatalogService(db).load_catalog(CATALOG_SEED)
    pokemon = (await db.exec(select(Pokemon))).all()
    biomes = (await db.exec(select(Biome))).all()
    return Catalog(
        pokemon={p.name: p for p in pokemon},
        biomes={b.name: b for b in biomes},
    )


@pytest_asyncio.fixture()
async def user(db: AsyncSession) -> User:
    user = User(username="ash")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


def build_game_service(db: AsyncSession, rng: random.Random) -> GameService:
    pity_service = PityService(db, rng)
    return GameService(
        db,
        catalog_service=CatalogService(db),
        spawn_service=SpawnService(db, rng),
        card_generator=CardGenerator(db, rng, pity_service),
        pity_service=pity_service,
    )


@pytest.fixture()
def game_service(db: AsyncSession, rng: random.Random) -> GameService:
    return build_game_service(db, rng)
