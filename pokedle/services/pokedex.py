from collections import Counter
from typing import Annotated

from fastapi import Depends, status
from sqlmodel import col, desc, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.db import get_db
from pokedle.core.exceptions import ValidationError
from pokedle.models.biome import Biome
from pokedle.models.card import Card
from pokedle.models.game import Game
from pokedle.models.pokedex_entry import PokedexEntry
from pokedle.models.pokemon import Pokemon
from pokedle.models.user import User
from pokedle.models.user_card import UserCard
from pokedle.schemas.pokedex import (
    BiomeWinCount,
    CardInstance,
    PokedexCard,
    PokedexCardDetail,
    PokedexStats,
)


class PokedexService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_pokedex(self, user: User) -> list[PokedexCard]:
        """Every catalog card with the user's capture status.

        Admins see every card as captured.
        """
        cards_result = await self.db.exec(
            select(Card)
            .join(Pokemon, col(Card.pokemon_id) == col(Pokemon.id))
            .order_by(col(Pokemon.pokedex_number), col(Card.tier), col(Card.id))
        )
        entries_result = await self.db.exec(
            select(PokedexEntry).where(PokedexEntry.user_id == user.id)
        )
        discovered = {entry.card_id: entry.discovered_at for entry in entries_result.all()}

        return [
            PokedexCard(
                card=card,
                captured=user.is_admin or card.id in discovered,
                discovered_at=discovered.get(card.id),
            )
            for card in cards_result.all()
        ]

    async def get_stats(self, user_id: int) -> PokedexStats:
        total_result = await self.db.exec(select(func.count()).select_from(Card))
        total_cards = total_result.one()

        owned_result = await self.db.exec(
            select(Card)
            .join(PokedexEntry, col(PokedexEntry.card_id) == col(Card.id))
            .where(PokedexEntry.user_id == user_id)
        )
        owned = owned_result.all()

        wins_result = await self.db.exec(
            select(Biome.name, func.count(col(Game.id)))
            .join(Game, col(Game.biome_id) == col(Biome.id))
            .where(Game.user_id == user_id, col(Game.completed).is_(True), col(Game.won).is_(True))
            .group_by(col(Biome.name))
            .order_by(col(Biome.name))
        )

        return PokedexStats(
            total_cards=total_cards,
            collected_cards=len(owned),
            completion_percentage=round(len(owned) / total_cards * 100) if total_cards else 0,
            cards_by_rarity=Counter(card.rarity for card in owned),
            wins_by_biome=[
                BiomeWinCount(biome=name, count=count) for name, count in wins_result.all()
            ],
            rarest_card=min(owned, key=lambda card: card.tier, default=None),
        )

    async def get_card_detail(self, user_id: int, card_id: int) -> PokedexCardDetail:
        """One card of the user's pokedex with every capture of it, newest first.

        Raises:
            ValidationError: If the card isn't in the user's pokedex (404).
        """
        entry_result = await self.db.exec(
            select(PokedexEntry, Card, Pokemon)
            .join(Card, col(PokedexEntry.card_id) == col(Card.id))
            .join(Pokemon, col(Card.pokemon_id) == col(Pokemon.id))
            .where(PokedexEntry.user_id == user_id, PokedexEntry.card_id == card_id)
        )
        row = entry_result.first()
        if not row:
            raise ValidationError("Card not in your pokedex", status_code=status.HTTP_404_NOT_FOUND)
        entry, card, pokemon = row

        instances_result = await self.db.exec(
            select(UserCard, Game, Biome)
            .join(Game, col(UserCard.game_id) == col(Game.id))
            .join(Biome, col(Game.biome_id) == col(Biome.id))
            .where(UserCard.user_id == user_id, UserCard.card_id == card_id)
            .order_by(desc(UserCard.obtained_at), desc(UserCard.id))
        )
        return PokedexCardDetail(
            card=card,
            pokemon=pokemon,
            discovered_at=entry.discovered_at,
            instances=[
                CardInstance(
                    id=user_card.id,
                    game_id=game.id,
                    biome_name=biome.name,
                    time_of_day=game.time_of_day,
                    tier=game.tier,
                    won=game.won,
                    obtained_at=user_card.obtained_at,
                )
                for user_card, game, biome in instances_result.all()
            ],
        )
