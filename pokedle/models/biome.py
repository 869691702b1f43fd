import sqlmodel

from ._base import BaseModel


class Biome(BaseModel, table=True):
    __tablename__: str = "biomes"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    name: str = sqlmodel.Field(max_length=100, unique=True, index=True)
    description: str | None = sqlmodel.Field(default=None, nullable=True)
    image_url: str | None = sqlmodel.Field(default=None, nullable=True)
