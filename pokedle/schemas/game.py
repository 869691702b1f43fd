from datetime import datetime

from pydantic import BaseModel, Field

from pokedle.core.enums import FeedbackType, TimeOfDay
from pokedle.models.card import Card
from pokedle.models.pokemon import Pokemon
from pokedle.schemas.pity import AppliedPity


class GuessFeedback(BaseModel):
    """Per-attribute verdicts for one guess."""

    type1: FeedbackType
    type2: FeedbackType
    evolution_stage: FeedbackType
    fully_evolved: FeedbackType
    color: FeedbackType
    generation: FeedbackType


class GameCreate(BaseModel):
    biome_id: int
    time_of_day: TimeOfDay = Field(description="Either 'day' or 'night'")


class GuessCreate(BaseModel):
    pokemon_id: int


class CaptureCreate(BaseModel):
    card_id: int


class PokemonSummary(BaseModel):
    id: int
    name: str
    image_url: str | None = None


class GuessRecord(BaseModel):
    guess_num: int
    pokemon: PokemonSummary
    feedback: GuessFeedback


class GameState(BaseModel):
    """A game as shown to its player. The answer stays hidden until completion."""

    id: int
    biome_id: int
    time_of_day: TimeOfDay
    guesses_used: int
    max_guesses: int
    completed: bool
    won: bool
    tier: int | None = None
    guesses: list[GuessRecord] = Field(default_factory=list)
    answer: Pokemon | None = None
    offered_cards: list[Card] | None = None
    captured_card_id: int | None = None
    created_at: datetime


class GuessResult(BaseModel):
    guess: GuessRecord
    game_completed: bool
    won: bool
    tier: int | None = None
    answer: Pokemon | None = None
    offered_cards: list[Card] | None = None


class CardOfferResponse(BaseModel):
    cards: list[Card]
    applied_pity: AppliedPity | None = None
    """None when the offer was generated by an earlier request"""


class GameHistoryEntry(BaseModel):
    id: int
    biome_name: str
    time_of_day: TimeOfDay
    guesses_used: int | None
    tier: int | None
    won: bool
    answer: Pokemon
    captured_card: Card | None = None
    created_at: datetime
