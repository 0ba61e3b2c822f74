from dataclasses import dataclass
from typing import Optional

from backend import RoomRegistry
from constants import DRIFT_THRESHOLD
from logging_config import get_logger
from models import VideoAction, VideoState
from schemas.rooms import VideoEvent, VideoLoadedEvent
from sessions import ConnectionHub, ConnectionSession

logger = get_logger(__name__)


@dataclass
class LocalPlayback:
    """What a receiving player should do with itself after a video event."""
    time: float
    paused: bool
    seeked: bool


def reconcile(action: VideoAction, local_time: float, local_paused: bool, event_time: float) -> LocalPlayback:
    """Reference implementation of the receiving client's reconciliation.

    The server never calls this; browser clients follow the same rules when
    applying a videoEvent to their player. Play only reseeks when drift
    exceeds DRIFT_THRESHOLD; pause and seek land exactly on the event time,
    and seek keeps the play/pause state.
    """
    action = VideoAction(action)
    if action == VideoAction.PLAY:
        if abs(local_time - event_time) > DRIFT_THRESHOLD:
            return LocalPlayback(time=event_time, paused=False, seeked=True)
        return LocalPlayback(time=local_time, paused=False, seeked=False)
    if action == VideoAction.PAUSE:
        return LocalPlayback(time=event_time, paused=True, seeked=local_time != event_time)
    return LocalPlayback(time=event_time, paused=local_paused, seeked=True)


class PlaybackSynchronizer:
    """Canonical (url, time, state) per room. Any member may drive playback."""

    def __init__(self, registry: RoomRegistry, hub: ConnectionHub):
        self.registry = registry
        self.hub = hub

    def load_video(self, session: ConnectionSession, url: str, time: Optional[float] = None) -> bool:
        room = self.registry.room_for(session)
        if room is None:
            logger.debug(f"Ignoring loadVideo from {session.connection_id}: not in a room")
            return False

        room.video_url = url
        room.video_time = max(time or 0.0, 0.0)
        room.video_state = VideoState.PAUSED
        logger.info(f"Video loaded in room {room.id} by {session.connection_id}: {url} at {room.video_time}")

        event = VideoLoadedEvent(url=url, time=room.video_time, state=room.video_state)
        self.hub.broadcast(room.member_ids(), "videoLoaded", event.to_wire())
        return True

    def video_action(self, session: ConnectionSession, action: VideoAction, time: float) -> bool:
        room = self.registry.room_for(session)
        if room is None:
            logger.debug(f"Ignoring videoAction from {session.connection_id}: not in a room")
            return False

        action = VideoAction(action)
        room.video_time = time
        if action == VideoAction.PLAY:
            room.video_state = VideoState.PLAYING
        elif action == VideoAction.PAUSE:
            room.video_state = VideoState.PAUSED
        logger.debug(f"Video {action.value} at {time} in room {room.id} by {session.connection_id}")

        event = VideoEvent(action=action, time=time)
        self.hub.broadcast(room.member_ids(exclude=session.connection_id), "videoEvent", event.to_wire())
        return True
