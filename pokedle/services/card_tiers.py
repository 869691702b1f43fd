"""Mapping between TCG card rarities and the six game performance tiers.

Tier 1 is a first-try solve and hands out the rarest cards, tier 6 means all
six guesses were used. Every tier lists its eligible rarities from the most
common (the tier's floor) to the rarest (the tier's ceiling):

    Tier 1: Illustration Rare ... Ultra Rare
    Tier 2: Double Rare ... Ultra Rare
    Tier 3: Rare ... Super Rare
    Tier 4: Uncommon ... Illustration Rare
    Tier 5: Common ... Double Rare
    Tier 6: Common ... Rare
"""

from dataclasses import dataclass

from pokedle.core.enums import CardRarity
from pokedle.core.exceptions import ValidationError

MIN_TIER = 1
MAX_TIER = 6

TIER_RARITY_MAP: dict[int, tuple[CardRarity, ...]] = {
    1: (
        CardRarity.ILLUSTRATION_RARE,
        CardRarity.SPECIAL_ILLUSTRATION_RARE,
        CardRarity.IMMERSIVE,
        CardRarity.SHINY_RARE,
        CardRarity.SHINY_SUPER_RARE,
        CardRarity.ULTRA_RARE,
    ),
    2: (
        CardRarity.DOUBLE_RARE,
        CardRarity.ILLUSTRATION_RARE,
        CardRarity.SUPER_RARE,
        CardRarity.SPECIAL_ILLUSTRATION_RARE,
        CardRarity.ULTRA_RARE,
    ),
    3: (
        CardRarity.RARE,
        CardRarity.DOUBLE_RARE,
        CardRarity.ILLUSTRATION_RARE,
        CardRarity.SUPER_RARE,
    ),
    4: (
        CardRarity.UNCOMMON,
        CardRarity.RARE,
        CardRarity.DOUBLE_RARE,
        CardRarity.ILLUSTRATION_RARE,
    ),
    5: (CardRarity.COMMON, CardRarity.UNCOMMON, CardRarity.RARE, CardRarity.DOUBLE_RARE),
    6: (CardRarity.COMMON, CardRarity.UNCOMMON, CardRarity.RARE),
}

RARITY_TO_TIERS: dict[CardRarity, tuple[int, ...]] = {
    rarity: tuple(tier for tier, rarities in TIER_RARITY_MAP.items() if rarity in rarities)
    for rarity in CardRarity
}

RARITY_WEIGHTS: dict[CardRarity, float] = {
    CardRarity.COMMON: 50,
    CardRarity.UNCOMMON: 30,
    CardRarity.RARE: 15,
    CardRarity.DOUBLE_RARE: 8,
    CardRarity.ILLUSTRATION_RARE: 5,
    CardRarity.SUPER_RARE: 3,
    CardRarity.SPECIAL_ILLUSTRATION_RARE: 2,
    CardRarity.IMMERSIVE: 1,
    CardRarity.SHINY_RARE: 1,
    CardRarity.SHINY_SUPER_RARE: 1,
    CardRarity.ULTRA_RARE: 2,
}

# Checked top to bottom, so longer names must come before their substrings
_RARITY_KEYWORDS: tuple[tuple[str, CardRarity], ...] = (
    ("ultra rare", CardRarity.ULTRA_RARE),
    ("rare ultra", CardRarity.ULTRA_RARE),
    ("shiny super rare", CardRarity.SHINY_SUPER_RARE),
    ("shiny rare", CardRarity.SHINY_RARE),
    ("immersive", CardRarity.IMMERSIVE),
    ("special illustration rare", CardRarity.SPECIAL_ILLUSTRATION_RARE),
    ("illustration rare", CardRarity.ILLUSTRATION_RARE),
    ("super rare", CardRarity.SUPER_RARE),
    ("double rare", CardRarity.DOUBLE_RARE),
    ("rare", CardRarity.RARE),
    ("uncommon", CardRarity.UNCOMMON),
    ("common", CardRarity.COMMON),
)


@dataclass(frozen=True, slots=True)
class CardTierVariant:
    """One tier-scoped catalog row derived from a printed card's rarity."""

    tier: int
    is_floor: bool
    is_ceiling: bool
    weight: float


def _to_rarity(rarity: str) -> CardRarity | None:
    try:
        return CardRarity(rarity)
    except ValueError:
        return None


def validate_tier(tier: int) -> int:
    if not MIN_TIER <= tier <= MAX_TIER:
        raise ValidationError(f"Tier must be between {MIN_TIER} and {MAX_TIER}, got {tier}")
    return tier


def get_rarities_for_tier(tier: int) -> tuple[CardRarity, ...]:
    return TIER_RARITY_MAP.get(tier, ())


def get_tiers_for_rarity(rarity: str) -> tuple[int, ...]:
    canonical = _to_rarity(rarity)
    if canonical is None:
        return ()
    return RARITY_TO_TIERS[canonical]


def is_rarity_in_tier(rarity: str, tier: int) -> bool:
    return rarity in get_rarities_for_tier(tier)


def get_weight_for_rarity(rarity: str) -> float:
    canonical = _to_rarity(rarity)
    if canonical is None:
        return 1
    return RARITY_WEIGHTS[canonical]


def is_floor_card(rarity: str, tier: int) -> bool:
    """Whether ``rarity`` is the most common rarity of ``tier``."""
    rarities = get_rarities_for_tier(tier)
    return bool(rarities) and rarities[0] == rarity


def is_ceiling_card(rarity: str, tier: int) -> bool:
    """Whether ``rarity`` is the rarest rarity of ``tier``."""
    rarities = get_rarities_for_tier(tier)
    return bool(rarities) and rarities[-1] == rarity


def normalize_rarity(tcg_rarity: str) -> CardRarity:
    """Map a free-form TCG rarity label (e.g. ``"Rare Holo"``) to a canonical rarity.

    Unknown labels fall back to Common.
    """
    normalized = tcg_rarity.lower().strip()
    for keyword, rarity in _RARITY_KEYWORDS:
        if keyword in normalized:
            return rarity
    return CardRarity.COMMON


def assign_tier_to_card(rarity: str) -> int:
    """Return the best (numerically lowest) tier ``rarity`` can appear in.

    Unknown rarities are placed in the worst tier.
    """
    tiers = get_tiers_for_rarity(rarity)
    if not tiers:
        return MAX_TIER
    return min(tiers)


def get_all_tiers_for_card(rarity: str) -> tuple[int, ...]:
    return get_tiers_for_rarity(rarity)


def tier_variants(rarity: CardRarity) -> list[CardTierVariant]:
    """Describe the catalog rows a printed card of ``rarity`` fans out into."""
    weight = get_weight_for_rarity(rarity)
    return [
        CardTierVariant(
            tier=tier,
            is_floor=is_floor_card(rarity, tier),
            is_ceiling=is_ceiling_card(rarity, tier),
            weight=weight,
        )
        for tier in get_all_tiers_for_card(rarity)
    ]
