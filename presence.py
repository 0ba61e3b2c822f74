from typing import List

from logging_config import get_logger
from models import Member, Room
from schemas.rooms import MemberInfo
from sessions import ConnectionHub

logger = get_logger(__name__)


def member_list(room: Room) -> List[dict]:
    return [MemberInfo.from_member(member).to_wire() for member in room.members]


class PresenceManager:
    """Publishes joins, leaves and fresh member lists to a room."""

    def __init__(self, hub: ConnectionHub):
        self.hub = hub

    def member_joined(self, room: Room, member: Member):
        self.hub.broadcast(
            room.member_ids(exclude=member.connection_id),
            "userJoined",
            MemberInfo.from_member(member).to_wire(),
        )
        self.publish_member_list(room)

    def member_left(self, room: Room, connection_id: str):
        if not room.members:
            logger.debug(f"Room {room.id} is empty, skipping presence for {connection_id}")
            return
        self.hub.broadcast(room.member_ids(exclude=connection_id), "userLeft", connection_id)
        self.publish_member_list(room)

    def publish_member_list(self, room: Room):
        self.hub.broadcast(room.member_ids(), "updateUserList", member_list(room))
