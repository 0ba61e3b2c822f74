from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import Member, Room, VideoAction, VideoState


class CamelModel(BaseModel):
    """Wire models use camelCase field names; python code uses snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# Frames

class InboundFrame(CamelModel):
    event: str = Field(min_length=1)
    data: Any = None
    id: Optional[int] = None


# Client -> server payloads

class CreateRoomRequest(CamelModel):
    username: Optional[str] = None


class JoinRoomRequest(CamelModel):
    room_id: str = Field(min_length=1)
    username: Optional[str] = None


class ChatMessageRequest(CamelModel):
    text: str


class LoadVideoRequest(CamelModel):
    model_config = ConfigDict(allow_inf_nan=False)

    url: str = Field(min_length=1)
    time: Optional[float] = None


class VideoActionRequest(CamelModel):
    model_config = ConfigDict(allow_inf_nan=False)

    action: VideoAction
    time: float = Field(ge=0)


class SignalRequest(CamelModel):
    target_connection_id: str = Field(min_length=1)
    payload: Any = None


# Server -> client payloads

class MemberInfo(CamelModel):
    connection_id: str
    username: str

    @classmethod
    def from_member(cls, member: Member) -> "MemberInfo":
        return cls(connection_id=member.connection_id, username=member.username)


class RoomState(CamelModel):
    id: str
    host_connection_id: str
    video_url: Optional[str] = None
    video_time: float = 0.0
    video_state: VideoState = VideoState.PAUSED
    members: List[MemberInfo] = []

    @classmethod
    def from_room(cls, room: Room) -> "RoomState":
        return cls(
            id=room.id,
            host_connection_id=room.host_connection_id,
            video_url=room.video_url,
            video_time=room.video_time,
            video_state=room.video_state,
            members=[MemberInfo.from_member(member) for member in room.members],
        )


class CreateRoomResponse(CamelModel):
    success: bool = True
    room_id: str
    room_state: RoomState


class JoinRoomResponse(CamelModel):
    success: bool
    room_id: Optional[str] = None
    room_state: Optional[RoomState] = None
    members: Optional[List[MemberInfo]] = None
    message: Optional[str] = None


class VideoLoadedEvent(CamelModel):
    url: str
    time: float
    state: VideoState


class VideoEvent(CamelModel):
    action: VideoAction
    time: float


class ChatMessageEvent(CamelModel):
    username: str
    text: str
    timestamp: str


class SignalEvent(CamelModel):
    sender_connection_id: str
    payload: Any = None


class ConnectedEvent(CamelModel):
    connection_id: str


class ErrorEvent(CamelModel):
    message: str


# HTTP

class RoomDetailsResponse(CamelModel):
    room_id: str
    host_connection_id: str
    video_url: Optional[str]
    video_time: float
    video_state: VideoState
    member_count: int
    members: List[MemberInfo]


class HealthResponse(BaseModel):
    status: str
    rooms: int
    connections: int
