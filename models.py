from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class VideoState(str, Enum):
    PAUSED = "paused"
    PLAYING = "playing"


class VideoAction(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    SEEK = "seek"


class SignalKind(str, Enum):
    OFFER = "webrtcOffer"
    ANSWER = "webrtcAnswer"
    ICE_CANDIDATE = "webrtcIceCandidate"


@dataclass
class Member:
    connection_id: str
    username: str


@dataclass
class Room:
    id: str
    host_connection_id: str
    video_url: Optional[str] = None
    video_time: float = 0.0
    video_state: VideoState = VideoState.PAUSED
    members: List[Member] = field(default_factory=list)

    def member(self, connection_id: str) -> Optional[Member]:
        return next((m for m in self.members if m.connection_id == connection_id), None)

    def has_member(self, connection_id: str) -> bool:
        return self.member(connection_id) is not None

    def member_ids(self, exclude: Optional[str] = None) -> List[str]:
        """Connection ids in join order, optionally without one of them."""
        return [member.connection_id for member in self.members if member.connection_id != exclude]
