import random
from collections import Counter
from collections.abc import Sequence

import pytest
from conftest import ExplodingRandom, FixedRandom

from pokedle.utils.selection import first_non_empty, weighted_choice


def test_equal_weights_converge_to_uniform() -> None:
    rng = random.Random(42)
    items = ["a", "b", "c", "d"]
    trials = 10_000

    counts = Counter(weighted_choice(items, rng, [1, 1, 1, 1]) for _ in range(trials))

    for item in items:
        assert abs(counts[item] / trials - 0.25) < 0.05


def test_heavier_item_wins_more_often() -> None:
    rng = random.Random(7)
    counts = Counter(weighted_choice(["light", "heavy"], rng, [1, 9]) for _ in range(5_000))

    assert counts["heavy"] > counts["light"] * 5


def test_missing_and_zero_weights_count_as_one() -> None:
    items = ["none", "zero", "two"]
    weights = [None, 0, 2]

    # total weight is 4: [0, 1) -> none, [1, 2) -> zero, [2, 4) -> two
    assert weighted_choice(items, FixedRandom(0.0), weights) == "none"
    assert weighted_choice(items, FixedRandom(0.4), weights) == "zero"
    assert weighted_choice(items, FixedRandom(0.9), weights) == "two"


def test_weights_default_to_item_attribute() -> None:
    class Item:
        def __init__(self, name: str, weight: float | None) -> None:
            self.name = name
            self.weight = weight

    items = [Item("a", 3), Item("b", 1)]

    assert weighted_choice(items, FixedRandom(0.7), None).name == "a"
    assert weighted_choice(items, FixedRandom(0.8), None).name == "b"


def test_single_item_skips_the_draw() -> None:
    assert weighted_choice(["only"], ExplodingRandom()) == "only"


def test_empty_sequence_raises() -> None:
    with pytest.raises(ValueError, match="empty"):
        weighted_choice([], random.Random(0))


def _provider(pool: Sequence[int]):
    async def provide() -> Sequence[int]:
        return pool

    return provide


@pytest.mark.asyncio()
async def test_first_non_empty_returns_first_pool_with_items() -> None:
    pool, level = await first_non_empty([_provider([]), _provider([1, 2]), _provider([3])])

    assert list(pool) == [1, 2]
    assert level == 1


@pytest.mark.asyncio()
async def test_first_non_empty_skips_later_providers() -> None:
    async def never() -> Sequence[int]:
        msg = "provider should not be called"
        raise AssertionError(msg)

    pool, level = await first_non_empty([_provider([5]), never])

    assert list(pool) == [5]
    assert level == 0


@pytest.mark.asyncio()
async def test_first_non_empty_all_empty() -> None:
    pool, level = await first_non_empty([_provider([]), _provider([])])

    assert not pool
    assert level == 2
