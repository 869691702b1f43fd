from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends, status
from loguru import logger
from sqlmodel import col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.db import get_db
from pokedle.core.enums import CardRarity
from pokedle.core.exceptions import ValidationError
from pokedle.models.biome import Biome
from pokedle.models.card import Card
from pokedle.models.game import Game
from pokedle.models.pokemon import Pokemon
from pokedle.models.pokemon_spawn import PokemonSpawn
from pokedle.schemas.catalog import (
    BiomeCreate,
    BiomeUpdate,
    CardSeed,
    CatalogLoadSummary,
    CatalogSeed,
)
from pokedle.services.card_tiers import MAX_TIER, MIN_TIER, normalize_rarity, tier_variants

PLACEHOLDER_SET_ID = "PLACEHOLDER"
PLACEHOLDER_WEIGHT = 10.0


def _check_references(seed: CatalogSeed) -> None:
    pokemon = {pokemon_seed.name for pokemon_seed in seed.pokemon}
    biomes = {biome_seed.name for biome_seed in seed.biomes}

    for spawn in seed.spawns:
        if spawn.pokemon not in pokemon:
            msg = f"Spawn references unknown pokemon {spawn.pokemon!r}"
            raise ValidationError(msg)
        if spawn.biome not in biomes:
            msg = f"Spawn of {spawn.pokemon} references unknown biome {spawn.biome!r}"
            raise ValidationError(msg)

    for card in seed.cards:
        if card.pokemon not in pokemon:
            msg = f"Card {card.tcgdex_id} references unknown pokemon {card.pokemon!r}"
            raise ValidationError(msg)


class CatalogService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def list_pokemon(self) -> Sequence[Pokemon]:
        result = await self.db.exec(select(Pokemon).order_by(col(Pokemon.name)))
        return result.all()

    async def get_pokemon(self, pokemon_id: int) -> Pokemon | None:
        result = await self.db.exec(select(Pokemon).where(Pokemon.id == pokemon_id))
        return result.first()

    async def list_biomes(self) -> Sequence[Biome]:
        result = await self.db.exec(select(Biome).order_by(col(Biome.id)))
        return result.all()

    async def get_biome(self, biome_id: int) -> Biome | None:
        result = await self.db.exec(select(Biome).where(Biome.id == biome_id))
        return result.first()

    async def _get_biome_by_name(self, name: str) -> Biome | None:
        result = await self.db.exec(select(Biome).where(Biome.name == name))
        return result.first()

    async def create_biome(self, biome_data: BiomeCreate) -> Biome:
        """Create a biome (admin only).

        Raises:
            ValidationError: If a biome with the same name exists (409).
        """
        if await self._get_biome_by_name(biome_data.name):
            raise ValidationError(
                f"Biome {biome_data.name!r} already exists", status_code=status.HTTP_409_CONFLICT
            )

        biome = Biome.model_validate(biome_data.model_dump())
        self.db.add(biome)
        await self.db.commit()
        await self.db.refresh(biome)
        logger.info(f"Biome {biome.name} created")
        return biome

    async def update_biome(self, biome_id: int, biome_data: BiomeUpdate) -> Biome | None:
        """Update a biome (admin only), leaving unset fields untouched."""
        biome = await self.get_biome(biome_id)
        if not biome:
            return None

        update = biome_data.model_dump(exclude_unset=True)
        if update.get("name") is None:
            update.pop("name", None)
        elif update["name"] != biome.name and await self._get_biome_by_name(update["name"]):
            raise ValidationError(
                f"Biome {update['name']!r} already exists", status_code=status.HTTP_409_CONFLICT
            )

        biome.sqlmodel_update(update)
        self.db.add(biome)
        await self.db.commit()
        await self.db.refresh(biome)
        return biome

    async def delete_biome(self, biome_id: int) -> bool:
        """Delete a biome and its spawn table (admin only).

        Raises:
            ValidationError: If games were played in the biome (409).
        """
        biome = await self.get_biome(biome_id)
        if not biome:
            return False

        games_result = await self.db.exec(
            select(func.count()).select_from(Game).where(Game.biome_id == biome_id)
        )
        if games_result.one():
            raise ValidationError(
                "Biome has games and cannot be deleted", status_code=status.HTTP_409_CONFLICT
            )

        spawns_result = await self.db.exec(
            select(PokemonSpawn).where(PokemonSpawn.biome_id == biome_id)
        )
        for spawn in spawns_result.all():
            await self.db.delete(spawn)
        # Spawns reference the biome and go first
        await self.db.flush()
        await self.db.delete(biome)
        await self.db.commit()
        logger.info(f"Biome {biome.name} deleted")
        return True

    async def list_cards(self) -> Sequence[Card]:
        """Every catalog card, ordered by tier then pokemon name."""
        result = await self.db.exec(
            select(Card).order_by(col(Card.tier), col(Card.pokemon_name), col(Card.id))
        )
        return result.all()

    async def add_card_variants(self, pokemon: Pokemon, card: CardSeed) -> list[Card]:
        """Add one catalog row per tier the printed card's rarity is eligible for."""
        rarity = normalize_rarity(card.rarity)
        cards = [
            Card(
                tcgdex_id=f"{card.tcgdex_id}-t{variant.tier}",
                pokemon_id=pokemon.id,
                pokemon_name=pokemon.name,
                set_id=card.set_id,
                set_name=card.set_name,
                rarity=rarity,
                tier=variant.tier,
                image_url=card.image_url,
                image_url_large=card.image_url_large,
                is_floor=variant.is_floor,
                is_ceiling=variant.is_ceiling,
                weight=variant.weight,
            )
            for variant in tier_variants(rarity)
        ]
        self.db.add_all(cards)
        return cards

    async def add_placeholder_cards(self, pokemon: Pokemon) -> list[Card]:
        """Give a pokemon without printed cards a Common card in every tier."""
        image_url = pokemon.image_url or ""
        cards = [
            Card(
                tcgdex_id=f"placeholder-{pokemon.name}-t{tier}",
                pokemon_id=pokemon.id,
                pokemon_name=pokemon.name,
                set_id=PLACEHOLDER_SET_ID,
                set_name="Placeholder Set",
                rarity=CardRarity.COMMON,
                tier=tier,
                image_url=image_url,
                image_url_large=image_url,
                is_floor=True,
                is_ceiling=False,
                weight=PLACEHOLDER_WEIGHT,
            )
            for tier in range(MIN_TIER, MAX_TIER + 1)
        ]
        self.db.add_all(cards)
        return cards

    async def load_catalog(self, seed: CatalogSeed) -> CatalogLoadSummary:
        """Insert biomes, pokemon, spawns and cards from a seed document.

        Every pokemon left without a card after loading gets placeholder cards,
        so each playable pokemon has at least one card.

        Raises:
            ValidationError: If a spawn or card names a pokemon or biome missing from the seed.
        """
        _check_references(seed)
        summary = CatalogLoadSummary()

        biomes: dict[str, Biome] = {}
        for biome_seed in seed.biomes:
            biome = Biome.model_validate(biome_seed.model_dump())
            self.db.add(biome)
            biomes[biome.name] = biome
        summary.biomes = len(biomes)

        pokemon_by_name: dict[str, Pokemon] = {}
        for pokemon_seed in seed.pokemon:
            pokemon = Pokemon.model_validate(pokemon_seed.model_dump())
            self.db.add(pokemon)
            pokemon_by_name[pokemon.name] = pokemon
        summary.pokemon = len(pokemon_by_name)

        # Assign primary keys before they are referenced
        await self.db.flush()

        for spawn_seed in seed.spawns:
            self.db.add(
                PokemonSpawn(
                    pokemon_id=pokemon_by_name[spawn_seed.pokemon].id,
                    biome_id=biomes[spawn_seed.biome].id,
                    time_of_day=spawn_seed.time_of_day,
                    spawn_weight=spawn_seed.spawn_weight,
                )
            )
        summary.spawns = len(seed.spawns)

        for card_seed in seed.cards:
            cards = await self.add_card_variants(pokemon_by_name[card_seed.pokemon], card_seed)
            summary.cards += len(cards)

        await self.db.flush()
        result = await self.db.exec(
            select(Pokemon).where(col(Pokemon.id).not_in(select(Card.pokemon_id)))
        )
        for pokemon in result.all():
            cards = await self.add_placeholder_cards(pokemon)
            summary.cards += len(cards)
            summary.placeholder_pokemon.append(pokemon.name)
            logger.warning(f"No printed cards for {pokemon.name}, created placeholders")

        await self.db.commit()
        logger.info(
            f"Catalog loaded: {summary.biomes} biomes, {summary.pokemon} pokemon, "
            f"{summary.spawns} spawns, {summary.cards} cards"
        )
        return summary

    async def count_cards(self) -> int:
        result = await self.db.exec(select(func.count()).select_from(Card))
        return result.one()
