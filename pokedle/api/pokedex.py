from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends

from pokedle.core.security import get_current_user
from pokedle.models.card import Card
from pokedle.models.user import User
from pokedle.schemas.common import APIResponse
from pokedle.schemas.pokedex import PokedexCard, PokedexCardDetail, PokedexStats
from pokedle.services.catalog import CatalogService
from pokedle.services.pokedex import PokedexService

router = APIRouter(prefix="/pokedex", tags=["pokedex"])


@router.get("/")
async def get_pokedex(
    service: Annotated[PokedexService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[list[PokedexCard]]:
    pokedex = await service.get_pokedex(user)
    return APIResponse(data=pokedex)


@router.get("/stats")
async def get_pokedex_stats(
    service: Annotated[PokedexService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[PokedexStats]:
    stats = await service.get_stats(user.id)
    return APIResponse(data=stats)


@router.get("/cards/all")
async def get_all_cards(
    service: Annotated[CatalogService, Depends()],
    _user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[Sequence[Card]]:
    """Every catalog card, ordered by tier then pokemon name."""
    cards = await service.list_cards()
    return APIResponse(data=cards)


@router.get("/{card_id}")
async def get_pokedex_card(
    card_id: int,
    service: Annotated[PokedexService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[PokedexCardDetail]:
    detail = await service.get_card_detail(user.id, card_id)
    return APIResponse(data=detail)
