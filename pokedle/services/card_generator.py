import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.db import get_db
from pokedle.core.exceptions import DataIntegrityError, PoolExhaustionError
from pokedle.core.rng import get_rng
from pokedle.models.card import Card
from pokedle.schemas.pity import AppliedPity, PityModifiers
from pokedle.services.card_tiers import MAX_TIER, MIN_TIER, validate_tier
from pokedle.services.pity import PityService
from pokedle.utils.selection import PoolProvider, first_non_empty, weighted_choice

OFFER_SIZE = 3
GUARANTEED_POOL_LEVELS = ("exact tier", "adjacent tiers", "any tier")


@dataclass(slots=True)
class CardOffer:
    cards: list[Card]
    """Always three cards, index 0 is the guaranteed card"""
    guaranteed_card: Card
    applied_pity: AppliedPity


class CardGenerator:
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db)],
        rng: Annotated[random.Random, Depends(get_rng)],
        pity_service: Annotated[PityService, Depends()],
    ) -> None:
        self.db = db
        self.rng = rng
        self.pity_service = pity_service

    async def generate_card_offers(
        self, user_id: int, tier: int, guaranteed_pokemon_id: int
    ) -> CardOffer:
        """Generate the three cards offered for a completed game.

        Reads the user's pity state without changing it; the pity transition is
        applied later, when the user captures one of the cards.

        Returns:
            A CardOffer with cards [guaranteed card, random card, random card].

        Raises:
            DataIntegrityError: If the guaranteed pokemon has no card at all.
        """
        validate_tier(tier)
        modifiers = await self.pity_service.get_pity_modifiers(user_id)

        effective_tier = tier
        if modifiers.tier_boost:
            effective_tier = max(MIN_TIER, tier - 1)
            logger.info(f"Tier boost activated for user {user_id}: {tier} -> {effective_tier}")
        if modifiers.guarantee_ceiling:
            logger.info(f"Hard pity active for user {user_id} at tier {effective_tier}")

        guaranteed_card = await self.select_guaranteed_card(guaranteed_pokemon_id, effective_tier)

        cards = [guaranteed_card]
        while len(cards) < OFFER_SIZE:
            cards.append(await self._select_offer_card(effective_tier, modifiers, cards))

        return CardOffer(
            cards=cards,
            guaranteed_card=guaranteed_card,
            applied_pity=AppliedPity(
                ceiling_boost=modifiers.ceiling_weight_multiplier,
                tier_boost=modifiers.tier_boost,
                hard_pity=modifiers.guarantee_ceiling,
            ),
        )

    async def _select_offer_card(
        self, tier: int, modifiers: PityModifiers, chosen: list[Card]
    ) -> Card:
        exclude_ids = [card.id for card in chosen]
        try:
            return await self.select_random_card(
                tier,
                ceiling_weight_multiplier=modifiers.ceiling_weight_multiplier,
                guarantee_ceiling=modifiers.guarantee_ceiling,
                exclude_ids=exclude_ids,
            )
        except PoolExhaustionError as exc:
            logger.warning(f"Random card selection failed ({exc.detail}), using any card")

        try:
            return await self.select_any_card(exclude_ids)
        except PoolExhaustionError:
            # The catalog has fewer cards than an offer holds
            logger.warning(f"Catalog exhausted, duplicating guaranteed card #{chosen[0].id}")
            return chosen[0]

    async def _cards_for_pokemon(
        self, pokemon_id: int, tiers: Sequence[int] | None = None
    ) -> Sequence[Card]:
        query = select(Card).where(Card.pokemon_id == pokemon_id)
        if tiers is not None:
            query = query.where(col(Card.tier).in_(tiers))
        result = await self.db.exec(query.order_by(col(Card.id)))
        return result.all()

    async def select_guaranteed_card(self, pokemon_id: int, tier: int) -> Card:
        """Select a card of the answer pokemon, widening the tier until one exists.

        Raises:
            DataIntegrityError: If the pokemon has no card in any tier.
        """
        adjacent = sorted({max(MIN_TIER, tier - 1), min(MAX_TIER, tier + 1)})
        providers: list[PoolProvider[Card]] = [
            lambda: self._cards_for_pokemon(pokemon_id, [tier]),
            lambda: self._cards_for_pokemon(pokemon_id, adjacent),
            lambda: self._cards_for_pokemon(pokemon_id),
        ]
        cards, level = await first_non_empty(providers)
        if not cards:
            logger.error(f"No cards found at all for pokemon {pokemon_id}")
            raise DataIntegrityError(
                f"No cards found for pokemon {pokemon_id}. "
                "Every playable pokemon must have at least one card."
            )

        logger.debug(
            f"Guaranteed card for pokemon {pokemon_id} at tier {tier}: "
            f"{len(cards)} candidates from {GUARANTEED_POOL_LEVELS[level]}"
        )
        return weighted_choice(cards, self.rng)

    async def _tier_cards(
        self, tier: int, exclude_ids: Sequence[int], *, ceiling_only: bool = False
    ) -> Sequence[Card]:
        query = select(Card).where(Card.tier == tier, col(Card.id).not_in(exclude_ids))
        if ceiling_only:
            query = query.where(col(Card.is_ceiling).is_(True))
        result = await self.db.exec(query.order_by(col(Card.id)))
        return result.all()

    async def select_random_card(
        self,
        tier: int,
        *,
        ceiling_weight_multiplier: float = 1.0,
        guarantee_ceiling: bool = False,
        exclude_ids: Sequence[int] = (),
    ) -> Card:
        """Select a weighted random card of ``tier``, boosting ceiling cards.

        With ``guarantee_ceiling`` only ceiling cards are drawn, as long as one is left.

        Raises:
            PoolExhaustionError: If the tier has no card outside ``exclude_ids``.
        """
        if guarantee_ceiling:
            ceiling_cards = await self._tier_cards(tier, exclude_ids, ceiling_only=True)
            if ceiling_cards:
                return weighted_choice(ceiling_cards, self.rng)
            logger.debug(f"No ceiling card left in tier {tier}, using the whole tier")

        cards = await self._tier_cards(tier, exclude_ids)
        if not cards:
            logger.error(f"No cards available for tier {tier}")
            raise PoolExhaustionError(f"No cards available for tier {tier}")

        weights = [
            (card.weight or 1) * ceiling_weight_multiplier if card.is_ceiling else card.weight
            for card in cards
        ]
        return weighted_choice(cards, self.rng, weights)

    async def select_any_card(self, exclude_ids: Sequence[int]) -> Card:
        """Last resort: the first catalog card not already chosen.

        Raises:
            PoolExhaustionError: If every catalog card is excluded.
        """
        result = await self.db.exec(
            select(Card).where(col(Card.id).not_in(exclude_ids)).order_by(col(Card.id)).limit(1)
        )
        card = result.first()
        if not card:
            raise PoolExhaustionError("No card left in the catalog")
        return card
