from enum import StrEnum


class CardRarity(StrEnum):
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    DOUBLE_RARE = "Double Rare"
    ILLUSTRATION_RARE = "Illustration Rare"
    SUPER_RARE = "Super Rare"
    SPECIAL_ILLUSTRATION_RARE = "Special Illustration Rare"
    IMMERSIVE = "Immersive"
    SHINY_RARE = "Shiny Rare"
    SHINY_SUPER_RARE = "Shiny Super Rare"
    ULTRA_RARE = "Ultra Rare"


class TimeOfDay(StrEnum):
    DAY = "day"
    NIGHT = "night"
    BOTH = "both"


class FeedbackType(StrEnum):
    CORRECT = "correct"
    PARTIAL = "partial"
    WRONG = "wrong"
    NOT_APPLICABLE = "n/a"


class EventType(StrEnum):
    GAME_STARTED = "game_started"
    GAME_COMPLETED = "game_completed"
    CARD_CAPTURED = "card_captured"
    PITY_RESET = "pity_reset"
