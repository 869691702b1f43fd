from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from pokedle.core.enums import TimeOfDay
from pokedle.core.security import require_admin
from pokedle.models.biome import Biome
from pokedle.models.pokemon import Pokemon
from pokedle.models.user import User
from pokedle.schemas.catalog import BiomeCreate, BiomeUpdate
from pokedle.schemas.common import APIResponse
from pokedle.services.catalog import CatalogService
from pokedle.services.spawn import SpawnService

router = APIRouter(prefix="/biomes", tags=["biomes"])


@router.get("/")
async def get_biomes(service: Annotated[CatalogService, Depends()]) -> APIResponse[Sequence[Biome]]:
    biomes = await service.list_biomes()
    return APIResponse(data=biomes)


@router.get("/{biome_id}")
async def get_biome(
    biome_id: int, service: Annotated[CatalogService, Depends()]
) -> APIResponse[Biome]:
    biome = await service.get_biome(biome_id)
    if not biome:
        raise HTTPException(status_code=404, detail="Biome not found")
    return APIResponse(data=biome)


@router.post("/", status_code=201)
async def create_biome(
    biome: BiomeCreate,
    service: Annotated[CatalogService, Depends()],
    _admin: Annotated[User, Depends(require_admin)],
) -> APIResponse[Biome]:
    created = await service.create_biome(biome)
    return APIResponse(data=created, message="Biome created successfully")


@router.patch("/{biome_id}")
async def update_biome(
    biome_id: int,
    biome: BiomeUpdate,
    service: Annotated[CatalogService, Depends()],
    _admin: Annotated[User, Depends(require_admin)],
) -> APIResponse[Biome]:
    updated = await service.update_biome(biome_id, biome)
    if not updated:
        raise HTTPException(status_code=404, detail="Biome not found")
    return APIResponse(data=updated, message="Biome updated successfully")


@router.delete("/{biome_id}")
async def delete_biome(
    biome_id: int,
    service: Annotated[CatalogService, Depends()],
    _admin: Annotated[User, Depends(require_admin)],
) -> APIResponse[None]:
    deleted = await service.delete_biome(biome_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Biome not found")
    return APIResponse(message="Biome deleted successfully")


@router.get("/{biome_id}/pokemon")
async def get_biome_pokemon(
    biome_id: int,
    service: Annotated[SpawnService, Depends()],
    time_of_day: Annotated[TimeOfDay, Query(description="Either 'day' or 'night'")],
) -> APIResponse[Sequence[Pokemon]]:
    """Pokemon that can spawn in a biome at the given time of day."""
    if time_of_day == TimeOfDay.BOTH:
        raise HTTPException(status_code=400, detail="time_of_day must be 'day' or 'night'")
    pokemon = await service.get_available_pokemon(biome_id, time_of_day)
    return APIResponse(data=pokemon)
