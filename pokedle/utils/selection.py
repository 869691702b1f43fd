import random
from collections.abc import Awaitable, Callable, Sequence

type PoolProvider[T] = Callable[[], Awaitable[Sequence[T]]]


def weighted_choice[T](
    items: Sequence[T], rng: random.Random, weights: Sequence[float | None] | None = None
) -> T:
    """Pick one item with probability proportional to its weight.

    Weights default to each item's ``weight`` attribute. A missing or zero
    weight counts as 1, so a badly seeded row can never break a draw.

    Raises:
        ValueError: If ``items`` is empty.
    """
    if not items:
        msg = "Cannot select from an empty sequence"
        raise ValueError(msg)

    if len(items) == 1:
        return items[0]

    if weights is None:
        weights = [getattr(item, "weight", None) for item in items]
    resolved = [w or 1.0 for w in weights]

    remainder = rng.random() * sum(resolved)
    for item, weight in zip(items, resolved, strict=True):
        remainder -= weight
        if remainder <= 0:
            return item

    # Floating point leftovers
    return items[-1]


async def first_non_empty[T](providers: Sequence[PoolProvider[T]]) -> tuple[Sequence[T], int]:
    """Try each pool provider in order and return the first non-empty pool.

    Returns:
        Tuple of (pool, index of the provider that produced it). The pool is
        empty and the index is ``len(providers)`` when every provider came up empty.
    """
    for level, provider in enumerate(providers):
        pool = await provider()
        if pool:
            return pool, level
    return (), len(providers)
