from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends, status
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, desc, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.db import get_db
from pokedle.core.enums import EventType, TimeOfDay
from pokedle.core.exceptions import DataIntegrityError, PoolExhaustionError, ValidationError
from pokedle.models.biome import Biome
from pokedle.models.card import Card
from pokedle.models.event_log import EventLog
from pokedle.models.game import Game
from pokedle.models.guess import Guess
from pokedle.models.pokedex_entry import PokedexEntry
from pokedle.models.pokemon import Pokemon
from pokedle.models.user_card import UserCard
from pokedle.schemas.game import (
    CardOfferResponse,
    GameHistoryEntry,
    GameState,
    GuessFeedback,
    GuessRecord,
    GuessResult,
    PokemonSummary,
)
from pokedle.services.card_generator import CardGenerator
from pokedle.services.catalog import CatalogService
from pokedle.services.feedback import (
    MAX_GUESSES,
    calculate_tier,
    generate_feedback,
    is_guess_correct,
)
from pokedle.services.pity import PityService
from pokedle.services.spawn import SpawnService

HISTORY_LIMIT = 50


def _summary(pokemon: Pokemon) -> PokemonSummary:
    return PokemonSummary(id=pokemon.id, name=pokemon.name, image_url=pokemon.image_url)


class GameService:
    def __init__(  # noqa: PLR0913, PLR0917
        self,
        db: Annotated[AsyncSession, Depends(get_db)],
        catalog_service: Annotated[CatalogService, Depends()],
        spawn_service: Annotated[SpawnService, Depends()],
        card_generator: Annotated[CardGenerator, Depends()],
        pity_service: Annotated[PityService, Depends()],
    ) -> None:
        self.db = db
        self.catalog_service = catalog_service
        self.spawn_service = spawn_service
        self.card_generator = card_generator
        self.pity_service = pity_service

    async def _get_own_game(self, game_id: int, user_id: int, *, for_update: bool = False) -> Game:
        query = select(Game).where(Game.id == game_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.exec(query)
        game = result.first()

        if not game:
            raise ValidationError("Game not found", status_code=status.HTTP_404_NOT_FOUND)
        if game.user_id != user_id:
            raise ValidationError("Unauthorized", status_code=status.HTTP_403_FORBIDDEN)
        return game

    async def _get_guesses(self, game_id: int) -> list[GuessRecord]:
        result = await self.db.exec(
            select(Guess, Pokemon)
            .join(Pokemon, col(Guess.pokemon_id) == col(Pokemon.id))
            .where(Guess.game_id == game_id)
            .order_by(col(Guess.guess_num))
        )
        return [
            GuessRecord(
                guess_num=guess.guess_num,
                pokemon=_summary(pokemon),
                feedback=GuessFeedback.model_validate(guess.feedback),
            )
            for guess, pokemon in result.all()
        ]

    async def _get_cards_in_order(self, card_ids: Sequence[int]) -> list[Card]:
        result = await self.db.exec(select(Card).where(col(Card.id).in_(card_ids)))
        cards = {card.id: card for card in result.all()}
        return [cards[card_id] for card_id in card_ids if card_id in cards]

    async def _get_capture(self, game_id: int) -> UserCard | None:
        result = await self.db.exec(select(UserCard).where(UserCard.game_id == game_id))
        return result.first()

    async def start_session(self, user_id: int, biome_id: int, time_of_day: TimeOfDay) -> GameState:
        """Start a new game with an answer drawn from the biome's spawns.

        Raises:
            ValidationError: If the time of day is not day or night, or the biome doesn't exist.
            PoolExhaustionError: If no pokemon with cards spawns in the biome.
        """
        if time_of_day == TimeOfDay.BOTH:
            raise ValidationError("time_of_day must be 'day' or 'night'")

        biome = await self.catalog_service.get_biome(biome_id)
        if not biome:
            raise ValidationError("Biome not found", status_code=status.HTTP_404_NOT_FOUND)

        pokemon_id = await self.spawn_service.select_random_pokemon(biome_id, time_of_day)

        game = Game(
            user_id=user_id, biome_id=biome_id, time_of_day=time_of_day, pokemon_id=pokemon_id
        )
        self.db.add(game)
        await self.db.flush()
        self.db.add(
            EventLog(
                user_id=user_id,
                event_type=EventType.GAME_STARTED,
                context={"game_id": game.id, "biome_id": biome_id, "time_of_day": time_of_day},
            )
        )
        await self.db.commit()
        await self.db.refresh(game)

        logger.info(f"User {user_id} started game {game.id} in biome {biome.name} ({time_of_day})")
        return GameState(
            id=game.id,
            biome_id=game.biome_id,
            time_of_day=game.time_of_day,
            guesses_used=0,
            max_guesses=MAX_GUESSES,
            completed=False,
            won=False,
            created_at=game.created_at,
        )

    async def get_game(self, game_id: int, user_id: int) -> GameState:
        """Get a game's state, revealing answer and offers only once it is completed."""
        game = await self._get_own_game(game_id, user_id)
        state = GameState(
            id=game.id,
            biome_id=game.biome_id,
            time_of_day=game.time_of_day,
            guesses_used=game.guesses_used or 0,
            max_guesses=MAX_GUESSES,
            completed=game.completed,
            won=game.won,
            tier=game.tier,
            guesses=await self._get_guesses(game.id),
            created_at=game.created_at,
        )
        if not game.completed:
            return state

        state.answer = await self.catalog_service.get_pokemon(game.pokemon_id)
        capture = await self._get_capture(game.id)
        if capture:
            state.captured_card_id = capture.card_id

        if game.offered_card_ids:
            state.offered_cards = await self._get_cards_in_order(game.offered_card_ids)
        elif not capture:
            # Offer generation failed when the game ended, try again
            try:
                offer = await self.complete_and_reward(game.id, user_id)
            except (DataIntegrityError, PoolExhaustionError):
                logger.exception(f"Failed to regenerate card offers for game {game.id}")
            else:
                state.offered_cards = offer.cards
                state.tier = game.tier
        return state

    async def submit_guess(self, game_id: int, user_id: int, pokemon_id: int) -> GuessResult:
        """Record a guess and return its feedback.

        The game ends on the correct pokemon or on the last allowed guess; card
        offers are then generated right away. If that generation fails the guess
        still stands and ``offered_cards`` is None until the game is read again.

        Raises:
            ValidationError: If the game is over, isn't the user's, or the pokemon doesn't exist,
                or a concurrent request already stored this guess number (409).
        """
        game = await self._get_own_game(game_id, user_id, for_update=True)
        if game.completed:
            raise ValidationError("Game already completed")

        count_result = await self.db.exec(
            select(func.count()).select_from(Guess).where(Guess.game_id == game_id)
        )
        guesses_so_far = count_result.one()
        if guesses_so_far >= MAX_GUESSES:
            raise ValidationError("Maximum guesses reached")

        guess_pokemon = await self.catalog_service.get_pokemon(pokemon_id)
        if not guess_pokemon:
            raise ValidationError("Pokemon not found", status_code=status.HTTP_404_NOT_FOUND)
        answer = await self.catalog_service.get_pokemon(game.pokemon_id)
        if not answer:
            raise DataIntegrityError(f"Answer pokemon {game.pokemon_id} of game {game.id} is gone")

        feedback = generate_feedback(guess_pokemon, answer)
        correct = is_guess_correct(guess_pokemon, answer)
        guess_num = guesses_so_far + 1

        self.db.add(
            Guess(
                game_id=game.id,
                guess_num=guess_num,
                pokemon_id=guess_pokemon.id,
                feedback=feedback.model_dump(mode="json"),
            )
        )

        game.guesses_used = guess_num
        if correct or guess_num >= MAX_GUESSES:
            game.completed = True
            game.won = correct
            game.tier = calculate_tier(guess_num)
            self.db.add(
                EventLog(
                    user_id=user_id,
                    event_type=EventType.GAME_COMPLETED,
                    context={"game_id": game.id, "won": correct, "tier": game.tier},
                )
            )

        self.db.add(game)
        try:
            await self.db.commit()
        except IntegrityError:
            # Another request stored this guess number first
            await self.db.rollback()
            raise ValidationError(
                f"Guess {guess_num} was already submitted", status_code=status.HTTP_409_CONFLICT
            ) from None

        offered_cards = None
        if game.completed:
            logger.info(f"Game {game.id} completed: won={correct}, tier={game.tier}")
            try:
                offer = await self.complete_and_reward(game.id, user_id)
            except (DataIntegrityError, PoolExhaustionError):
                # get_game and complete_and_reward generate the offers again later
                logger.exception(f"Failed to generate card offers for game {game.id}")
            else:
                offered_cards = offer.cards

        return GuessResult(
            guess=GuessRecord(
                guess_num=guess_num, pokemon=_summary(guess_pokemon), feedback=feedback
            ),
            game_completed=game.completed,
            won=game.won,
            tier=game.tier,
            answer=answer if game.completed else None,
            offered_cards=offered_cards,
        )

    async def complete_and_reward(self, game_id: int, user_id: int) -> CardOfferResponse:
        """Return the card offers of a completed game, generating them on first call.

        The pity state is only read here; it changes when a card is captured.

        Raises:
            ValidationError: If the game isn't completed or isn't the user's.
            DataIntegrityError: If the answer pokemon has no card.
        """
        game = await self._get_own_game(game_id, user_id, for_update=True)
        if not game.completed:
            raise ValidationError("Game not completed yet")

        if game.offered_card_ids:
            return CardOfferResponse(cards=await self._get_cards_in_order(game.offered_card_ids))

        tier = game.tier or calculate_tier(game.guesses_used or MAX_GUESSES)
        offer = await self.card_generator.generate_card_offers(user_id, tier, game.pokemon_id)

        game.offered_card_ids = [card.id for card in offer.cards]
        game.tier = tier
        self.db.add(game)
        await self.db.commit()

        return CardOfferResponse(cards=offer.cards, applied_pity=offer.applied_pity)

    async def capture_card(self, game_id: int, user_id: int, card_id: int) -> UserCard:
        """Capture one of the offered cards and apply the game's pity transition.

        The pity transition is keyed on whether the captured card is a ceiling
        card, not on what was offered. Capture, pokedex entry and pity update
        are committed together.

        Raises:
            ValidationError: If the game isn't completed, already has a capture,
                or the card wasn't offered.
        """
        game = await self._get_own_game(game_id, user_id, for_update=True)
        if not game.completed:
            raise ValidationError("Game not completed yet")

        if await self._get_capture(game.id):
            raise ValidationError("Card already captured for this game")

        if not game.offered_card_ids or card_id not in game.offered_card_ids:
            raise ValidationError("Card not offered for this game")

        result = await self.db.exec(select(Card).where(Card.id == card_id))
        card = result.first()
        if not card:
            raise ValidationError("Card not found", status_code=status.HTTP_404_NOT_FOUND)

        user_card = UserCard(user_id=user_id, card_id=card.id, game_id=game.id)
        self.db.add(user_card)

        entry_result = await self.db.exec(
            select(PokedexEntry).where(
                PokedexEntry.user_id == user_id, PokedexEntry.card_id == card.id
            )
        )
        if not entry_result.first():
            self.db.add(PokedexEntry(user_id=user_id, card_id=card.id))

        tier = game.tier or calculate_tier(game.guesses_used or MAX_GUESSES)
        await self.pity_service.record_game(user_id, tier=tier, pulled_ceiling=card.is_ceiling)

        self.db.add(
            EventLog(
                user_id=user_id,
                event_type=EventType.CARD_CAPTURED,
                context={
                    "game_id": game.id,
                    "card_id": card.id,
                    "tier": tier,
                    "is_ceiling": card.is_ceiling,
                },
            )
        )

        await self.db.commit()
        await self.db.refresh(user_card)
        logger.info(f"User {user_id} captured card {card} from game {game.id}")
        return user_card

    async def get_history(
        self, user_id: int, *, limit: int = HISTORY_LIMIT
    ) -> list[GameHistoryEntry]:
        """Get the user's most recent completed games, newest first."""
        result = await self.db.exec(
            select(Game, Biome, Pokemon, Card)
            .join(Biome, col(Game.biome_id) == col(Biome.id))
            .join(Pokemon, col(Game.pokemon_id) == col(Pokemon.id))
            .outerjoin(UserCard, col(UserCard.game_id) == col(Game.id))
            .outerjoin(Card, col(Card.id) == col(UserCard.card_id))
            .where(Game.user_id == user_id, col(Game.completed).is_(True))
            .order_by(desc(Game.created_at), desc(Game.id))
            .limit(limit)
        )
        return [
            GameHistoryEntry(
                id=game.id,
                biome_name=biome.name,
                time_of_day=game.time_of_day,
                guesses_used=game.guesses_used,
                tier=game.tier,
                won=game.won,
                answer=pokemon,
                captured_card=card,
                created_at=game.created_at,
            )
            for game, biome, pokemon, card in result.all()
        ]
