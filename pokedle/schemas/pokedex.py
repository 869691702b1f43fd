from datetime import datetime

from pydantic import BaseModel, Field

from pokedle.core.enums import CardRarity, TimeOfDay
from pokedle.models.card import Card
from pokedle.models.pokemon import Pokemon


class PokedexCard(BaseModel):
    card: Card
    captured: bool
    discovered_at: datetime | None = None


class BiomeWinCount(BaseModel):
    biome: str
    count: int


class PokedexStats(BaseModel):
    total_cards: int = Field(description="Number of cards in the catalog")
    collected_cards: int = Field(description="Number of distinct cards the user has captured")
    completion_percentage: int
    cards_by_rarity: dict[CardRarity, int]
    wins_by_biome: list[BiomeWinCount]
    rarest_card: Card | None = Field(
        default=None, description="Captured card with the best (lowest) tier"
    )


class CardInstance(BaseModel):
    """One capture of a card, with the game it came from."""

    id: int
    game_id: int
    biome_name: str
    time_of_day: TimeOfDay
    tier: int | None
    won: bool
    obtained_at: datetime


class PokedexCardDetail(BaseModel):
    card: Card
    pokemon: Pokemon
    discovered_at: datetime
    instances: list[CardInstance] = Field(description="Captures of this card, newest first")
