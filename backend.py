import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from constants import DEFAULT_USERNAME, ROOM_ID_LENGTH
from logging_config import get_logger
from models import Member, Room
from sessions import ConnectionSession

logger = get_logger(__name__)


class RoomNotFoundError(LookupError):
    def __init__(self, room_id: str):
        super().__init__(f"Room {room_id} not found")
        self.room_id = room_id


@dataclass
class LeaveResult:
    room: Room
    member: Member
    room_deleted: bool


def generate_room_id(length: int = ROOM_ID_LENGTH) -> str:
    return uuid.uuid4().hex[:length]


class RoomRegistry:
    """In-memory room table: room id -> Room.

    All methods are synchronous, so a single mutation never interleaves with
    another one on the event loop.
    """

    def __init__(self, room_id_length: int = ROOM_ID_LENGTH):
        self.room_id_length = room_id_length
        self._rooms: Dict[str, Room] = {}
        logger.info("Initializing in-memory RoomRegistry")

    def _allocate_room_id(self) -> str:
        room_id = generate_room_id(self.room_id_length)
        while room_id in self._rooms:
            logger.debug(f"Room id {room_id} already in use, regenerating")
            room_id = generate_room_id(self.room_id_length)
        return room_id

    def create_room(self, session: ConnectionSession, username: Optional[str] = None) -> Room:
        """Create a room with the session as host and sole member.

        The session must not belong to a room; the caller leaves first.
        """
        room_id = self._allocate_room_id()
        session.username = username or session.username or DEFAULT_USERNAME
        member = Member(connection_id=session.connection_id, username=session.username)
        room = Room(id=room_id, host_connection_id=session.connection_id, members=[member])
        self._rooms[room_id] = room
        session.room_id = room_id
        logger.info(f"Room created: {room_id} by {session.username} ({session.connection_id})")
        return room

    def join_room(self, session: ConnectionSession, room_id: str, username: Optional[str] = None) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        session.username = username or session.username or DEFAULT_USERNAME
        member = room.member(session.connection_id)
        if member is None:
            room.members.append(Member(connection_id=session.connection_id, username=session.username))
        else:
            member.username = session.username
        session.room_id = room_id
        logger.info(f"{session.username} ({session.connection_id}) joined room: {room_id} (members: {len(room.members)})")
        return room

    def leave(self, session: ConnectionSession) -> Optional[LeaveResult]:
        room_id = session.room_id
        session.room_id = None
        if room_id is None:
            return None
        room = self._rooms.get(room_id)
        if room is None:
            return None

        member = room.member(session.connection_id)
        if member is None:
            return None
        room.members.remove(member)
        logger.info(f"{member.username} ({member.connection_id}) left room: {room_id} (members: {len(room.members)})")

        room_deleted = not room.members
        if room_deleted:
            del self._rooms[room_id]
            logger.info(f"Room deleted: {room_id}")
        return LeaveResult(room=room, member=member, room_deleted=room_deleted)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def room_for(self, session: ConnectionSession) -> Optional[Room]:
        """The room the session currently belongs to, if it is still a member."""
        if session.room_id is None:
            return None
        room = self._rooms.get(session.room_id)
        if room is None or not room.has_member(session.connection_id):
            return None
        return room

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
