import sqlmodel

from ._base import BaseModel


class Pokemon(BaseModel, table=True):
    __tablename__: str = "pokemon"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    name: str = sqlmodel.Field(max_length=100, unique=True, index=True)
    pokedex_number: int = sqlmodel.Field(index=True, ge=1)
    type1: str = sqlmodel.Field(index=True)
    type2: str | None = sqlmodel.Field(default=None, nullable=True)
    evolution_stage: int = sqlmodel.Field(ge=1)
    fully_evolved: bool
    color: str
    generation: int = sqlmodel.Field(index=True, ge=1)
    image_url: str | None = sqlmodel.Field(default=None, nullable=True)

    def __str__(self) -> str:
        return f"{self.name} (#{self.pokedex_number})"
