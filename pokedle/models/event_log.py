import sqlmodel

from pokedle.core.enums import EventType

from ._base import BaseModel


class EventLog(BaseModel, table=True):
    __tablename__: str = "event_logs"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    user_id: int = sqlmodel.Field(foreign_key="users.id", index=True)
    event_type: EventType
    context: dict = sqlmodel.Field(sa_column=sqlmodel.Column(sqlmodel.JSON))
