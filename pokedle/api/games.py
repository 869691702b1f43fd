from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends

from pokedle.core.security import get_current_user
from pokedle.models.pokemon import Pokemon
from pokedle.models.user import User
from pokedle.models.user_card import UserCard
from pokedle.schemas.common import APIResponse
from pokedle.schemas.game import (
    CaptureCreate,
    CardOfferResponse,
    GameCreate,
    GameHistoryEntry,
    GameState,
    GuessCreate,
    GuessResult,
)
from pokedle.services.catalog import CatalogService
from pokedle.services.game import GameService

router = APIRouter(prefix="/games", tags=["games"])


@router.get("/pokemon")
async def get_pokemon(
    service: Annotated[CatalogService, Depends()],
) -> APIResponse[Sequence[Pokemon]]:
    """All pokemon, for guess autocomplete."""
    pokemon = await service.list_pokemon()
    return APIResponse(data=pokemon)


@router.get("/history")
async def get_history(
    service: Annotated[GameService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[list[GameHistoryEntry]]:
    history = await service.get_history(user.id)
    return APIResponse(data=history)


@router.post("/", status_code=201)
async def start_game(
    game: GameCreate,
    service: Annotated[GameService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[GameState]:
    state = await service.start_session(user.id, game.biome_id, game.time_of_day)
    return APIResponse(data=state, message="Game started")


@router.get("/{game_id}")
async def get_game(
    game_id: int,
    service: Annotated[GameService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[GameState]:
    state = await service.get_game(game_id, user.id)
    return APIResponse(data=state)


@router.post("/{game_id}/guess")
async def submit_guess(
    game_id: int,
    guess: GuessCreate,
    service: Annotated[GameService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[GuessResult]:
    result = await service.submit_guess(game_id, user.id, guess.pokemon_id)
    return APIResponse(data=result)


@router.post("/{game_id}/rewards")
async def get_rewards(
    game_id: int,
    service: Annotated[GameService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[CardOfferResponse]:
    """Card offers of a completed game, generated if the game has none yet."""
    offer = await service.complete_and_reward(game_id, user.id)
    return APIResponse(data=offer)


@router.post("/{game_id}/capture")
async def capture_card(
    game_id: int,
    capture: CaptureCreate,
    service: Annotated[GameService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[UserCard]:
    user_card = await service.capture_card(game_id, user.id, capture.card_id)
    return APIResponse(data=user_card, message="Card captured successfully")
