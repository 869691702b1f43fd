import sqlmodel

from pokedle.core.enums import CardRarity

from ._base import BaseModel


class Card(BaseModel, table=True):
    """One tier-scoped row of a printed card.

    A printed card whose rarity is eligible for several tiers is stored once per
    tier, so every selection query can filter on ``tier`` directly.
    """

    __tablename__: str = "cards"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    tcgdex_id: str = sqlmodel.Field(unique=True, index=True)
    pokemon_id: int = sqlmodel.Field(foreign_key="pokemon.id", index=True)
    pokemon_name: str
    set_id: str
    set_name: str
    rarity: CardRarity = sqlmodel.Field(index=True)
    tier: int = sqlmodel.Field(index=True, ge=1, le=6)
    image_url: str
    image_url_large: str | None = sqlmodel.Field(default=None, nullable=True)
    is_floor: bool = False
    """Lowest rarity of its tier"""
    is_ceiling: bool = False
    """Highest rarity of its tier, the target of the pity system"""
    weight: float = sqlmodel.Field(default=1.0, ge=0.0)

    def __str__(self) -> str:
        return f"{self.pokemon_name} {self.rarity} T{self.tier} (#{self.id})"
