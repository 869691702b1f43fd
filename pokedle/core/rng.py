import random

from pokedle.core.config import settings

rng = random.Random(settings.rng_seed)


def get_rng() -> random.Random:
    """Process-wide random source used for every weighted draw."""
    return rng
