from pydantic import BaseModel, Field

from pokedle.core.enums import TimeOfDay


class BiomeSeed(BaseModel):
    name: str
    description: str | None = None
    image_url: str | None = None


class BiomeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = None


class BiomeUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = None


class PokemonSeed(BaseModel):
    name: str
    pokedex_number: int
    type1: str
    type2: str | None = None
    evolution_stage: int
    fully_evolved: bool
    color: str
    generation: int
    image_url: str | None = None


class SpawnSeed(BaseModel):
    pokemon: str = Field(description="Pokemon name")
    biome: str = Field(description="Biome name")
    time_of_day: TimeOfDay
    spawn_weight: float = 1.0


class CardSeed(BaseModel):
    """A printed card, fanned out into one catalog row per eligible tier."""

    tcgdex_id: str
    pokemon: str = Field(description="Pokemon name")
    rarity: str = Field(description="Raw TCG rarity label, normalised on load")
    set_id: str
    set_name: str
    image_url: str
    image_url_large: str | None = None


class CatalogSeed(BaseModel):
    biomes: list[BiomeSeed] = Field(default_factory=list)
    pokemon: list[PokemonSeed] = Field(default_factory=list)
    spawns: list[SpawnSeed] = Field(default_factory=list)
    cards: list[CardSeed] = Field(default_factory=list)


class CatalogLoadSummary(BaseModel):
    biomes: int = 0
    pokemon: int = 0
    spawns: int = 0
    cards: int = 0
    placeholder_pokemon: list[str] = Field(default_factory=list)
