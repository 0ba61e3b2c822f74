from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from backend import RoomNotFoundError, RoomRegistry
from chat import ChatRelay
from logging_config import get_logger
from models import SignalKind
from playback import PlaybackSynchronizer
from presence import PresenceManager
from schemas.rooms import (
    ChatMessageRequest,
    ConnectedEvent,
    CreateRoomRequest,
    CreateRoomResponse,
    ErrorEvent,
    InboundFrame,
    JoinRoomRequest,
    JoinRoomResponse,
    LoadVideoRequest,
    MemberInfo,
    RoomState,
    SignalRequest,
    VideoActionRequest,
)
from sessions import ConnectionHub, ConnectionSession
from signaling import SignalingRelay

logger = get_logger(__name__)

ACKNOWLEDGED_EVENTS = {"createRoom", "joinRoom"}


@dataclass
class Reply:
    """Response to an acknowledged request and the broadcast that follows it."""
    payload: dict
    publish: Optional[Callable[[], None]] = None


class RoomCoordinator:
    """Entry point for every request a connection makes.

    Each handler runs to completion (state change plus queued events) without
    yielding to the event loop, which serializes operations per room.
    """

    def __init__(self, registry: Optional[RoomRegistry] = None, hub: Optional[ConnectionHub] = None):
        self.registry = registry if registry is not None else RoomRegistry()
        self.hub = hub if hub is not None else ConnectionHub()
        self.presence = PresenceManager(self.hub)
        self.playback = PlaybackSynchronizer(self.registry, self.hub)
        self.chat = ChatRelay(self.registry, self.hub)
        self.signaling = SignalingRelay(self.registry, self.hub)

        self._handlers: Dict[str, Callable[[ConnectionSession, Any], Optional[Reply]]] = {
            "createRoom": self.create_room,
            "joinRoom": self.join_room,
            "leaveRoom": self.leave_room,
            "chatMessage": self.chat_message,
            "loadVideo": self.load_video,
            "videoAction": self.video_action,
            SignalKind.OFFER.value: self._signal_handler(SignalKind.OFFER),
            SignalKind.ANSWER.value: self._signal_handler(SignalKind.ANSWER),
            SignalKind.ICE_CANDIDATE.value: self._signal_handler(SignalKind.ICE_CANDIDATE),
        }

    # Connection lifecycle

    def connect(self) -> ConnectionSession:
        session = self.hub.open()
        self.hub.send(session.connection_id, "connected", ConnectedEvent(connection_id=session.connection_id).to_wire())
        logger.info(f"User connected: {session.connection_id}")
        return session

    def disconnect(self, session: ConnectionSession) -> bool:
        """Run the leave cascade for a closed transport. Acts once per connection."""
        if self.hub.close(session.connection_id) is None:
            return False
        logger.info(f"User disconnected: {session.connection_id}")
        self._leave(session)
        return True

    # Dispatch

    def handle(self, session: ConnectionSession, raw: Any) -> Optional[dict]:
        """Validate and dispatch one inbound frame.

        Acknowledged events get their ack queued to the requester before
        anything is broadcast to the room. Returns the ack frame, if any.
        """
        try:
            frame = InboundFrame.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Rejected malformed frame from {session.connection_id}: {e.error_count()} errors")
            self.send_error(session, "Malformed message")
            return None

        handler = self._handlers.get(frame.event)
        if handler is None:
            logger.warning(f"Unknown event {frame.event!r} from {session.connection_id}")
            self.send_error(session, f"Unknown event: {frame.event}")
            return None

        logger.debug(f"Handling {frame.event} from {session.connection_id}")
        try:
            result = handler(session, frame.data if frame.data is not None else {})
        except ValidationError as e:
            logger.warning(f"Rejected invalid {frame.event} payload from {session.connection_id}: {e.error_count()} errors")
            if frame.event in ACKNOWLEDGED_EVENTS:
                result = Reply(JoinRoomResponse(success=False, message=f"Invalid {frame.event} request.").to_wire())
            else:
                self.send_error(session, f"Invalid {frame.event} request")
                return None

        if frame.event not in ACKNOWLEDGED_EVENTS:
            return None
        ack = {"event": "ack", "id": frame.id, "data": result.payload}
        self.hub.push(session.connection_id, ack)
        if result.publish is not None:
            result.publish()
        return ack

    def send_error(self, session: ConnectionSession, message: str):
        self.hub.send(session.connection_id, "error", ErrorEvent(message=message).to_wire())

    # Room membership

    def create_room(self, session: ConnectionSession, data: Any) -> Reply:
        request = CreateRoomRequest.model_validate(data)
        self._leave(session)
        room = self.registry.create_room(session, request.username)
        return Reply(CreateRoomResponse(room_id=room.id, room_state=RoomState.from_room(room)).to_wire())

    def join_room(self, session: ConnectionSession, data: Any) -> Reply:
        request = JoinRoomRequest.model_validate(data)
        if request.room_id not in self.registry:
            logger.warning(f"Join failed for {session.connection_id}: room {request.room_id} not found")
            return Reply(JoinRoomResponse(success=False, message="Room not found.").to_wire())

        already_member = session.room_id == request.room_id and self.registry.room_for(session) is not None
        previous_name = session.username
        if not already_member:
            self._leave(session)
        try:
            room = self.registry.join_room(session, request.room_id, request.username)
        except RoomNotFoundError:
            return Reply(JoinRoomResponse(success=False, message="Room not found.").to_wire())

        response = JoinRoomResponse(
            success=True,
            room_id=room.id,
            room_state=RoomState.from_room(room),
            members=[MemberInfo.from_member(member) for member in room.members],
        ).to_wire()

        if already_member:
            if session.username != previous_name:
                return Reply(response, publish=lambda: self.presence.publish_member_list(room))
            return Reply(response)
        member = room.member(session.connection_id)
        return Reply(response, publish=lambda: self.presence.member_joined(room, member))

    def leave_room(self, session: ConnectionSession, data: Any = None):
        self._leave(session)

    def _leave(self, session: ConnectionSession):
        result = self.registry.leave(session)
        if result is not None and not result.room_deleted:
            self.presence.member_left(result.room, result.member.connection_id)

    # Chat, playback, signaling

    def chat_message(self, session: ConnectionSession, data: Any):
        # Bare strings are accepted as the message text
        if isinstance(data, str):
            data = {"text": data}
        request = ChatMessageRequest.model_validate(data)
        self.chat.send_chat(session, request.text)

    def load_video(self, session: ConnectionSession, data: Any):
        request = LoadVideoRequest.model_validate(data)
        self.playback.load_video(session, request.url, request.time)

    def video_action(self, session: ConnectionSession, data: Any):
        request = VideoActionRequest.model_validate(data)
        self.playback.video_action(session, request.action, request.time)

    def _signal_handler(self, kind: SignalKind):
        def forward(session: ConnectionSession, data: Any):
            request = SignalRequest.model_validate(data)
            self.signaling.forward(session, kind, request.target_connection_id, request.payload)
        return forward
