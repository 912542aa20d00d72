from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict:
        return self.model_dump(by_alias=True)


# Inbound frames

class InboundMessage(BaseModel):
    event: str
    data: Optional[Any] = None


class RoomCodeRequest(CamelModel):
    room_code: str


class SignalRequest(CamelModel):
    room_code: str
    target: str
    signal: Optional[Any] = None


# Outbound payloads

class ConnectedEvent(CamelModel):
    connection_id: str


class RoomCodeEvent(CamelModel):
    room_code: str


class ErrorEvent(CamelModel):
    message: str


class MonitorJoinedEvent(CamelModel):
    monitor_id: str
    room_code: str
    total_viewers: int


class MonitorLeftEvent(CamelModel):
    monitor_id: str
    total_viewers: int


class SignalEvent(CamelModel):
    sender: str = Field(alias="from")
    signal: Optional[Any] = None
