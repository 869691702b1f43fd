from pokedle.core.enums import FeedbackType
from pokedle.models.pokemon import Pokemon
from pokedle.schemas.game import GuessFeedback
from pokedle.services.card_tiers import MAX_TIER, MIN_TIER

MAX_GUESSES = 6


def generate_feedback(guess: Pokemon, answer: Pokemon) -> GuessFeedback:
    """Compare a guessed pokemon's attributes against the answer."""
    return GuessFeedback(
        type1=_compare_types(guess, answer, position=1),
        type2=_compare_types(guess, answer, position=2),
        evolution_stage=_compare_exact(guess.evolution_stage, answer.evolution_stage),
        fully_evolved=_compare_exact(guess.fully_evolved, answer.fully_evolved),
        color=_compare_exact(guess.color, answer.color),
        generation=_compare_exact(guess.generation, answer.generation),
    )


def _compare_types(guess: Pokemon, answer: Pokemon, *, position: int) -> FeedbackType:
    """Position-aware type comparison.

    - correct: same type in the same slot
    - partial: the type is the answer's other slot
    - wrong: the answer doesn't have the type
    - n/a: slot 2 of a single-typed answer
    """
    if position == 1:
        guess_type, answer_type, other_answer_type = guess.type1, answer.type1, answer.type2
    else:
        guess_type, answer_type, other_answer_type = guess.type2, answer.type2, answer.type1

    if position == 2 and answer.type2 is None:  # noqa: PLR2004
        return FeedbackType.NOT_APPLICABLE

    if guess_type is None:
        return FeedbackType.WRONG

    if guess_type == answer_type:
        return FeedbackType.CORRECT

    if guess_type == other_answer_type:
        return FeedbackType.PARTIAL

    return FeedbackType.WRONG


def _compare_exact[T](guess_value: T, answer_value: T) -> FeedbackType:
    return FeedbackType.CORRECT if guess_value == answer_value else FeedbackType.WRONG


def is_guess_correct(guess: Pokemon, answer: Pokemon) -> bool:
    """A game is won by naming the answer itself, matching attributes is not enough."""
    return guess.id == answer.id


def calculate_tier(guesses_used: int) -> int:
    """Tier 1 for a first-try solve up to tier 6 once every guess is spent."""
    return max(MIN_TIER, min(MAX_TIER, guesses_used))
