from datetime import datetime
from typing import Optional

from backend import RoomRegistry
from constants import CHAT_TIMESTAMP_FORMAT, DEFAULT_USERNAME
from logging_config import get_logger
from schemas.rooms import ChatMessageEvent
from sessions import ConnectionHub, ConnectionSession

logger = get_logger(__name__)


def chat_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return now.strftime(CHAT_TIMESTAMP_FORMAT).lstrip("0")


class ChatRelay:
    def __init__(self, registry: RoomRegistry, hub: ConnectionHub):
        self.registry = registry
        self.hub = hub

    def send_chat(self, session: ConnectionSession, text: str) -> bool:
        room = self.registry.room_for(session)
        if room is None:
            logger.debug(f"Ignoring chat from {session.connection_id}: not in a room")
            return False

        message = ChatMessageEvent(
            username=session.username or DEFAULT_USERNAME,
            text=text,
            timestamp=chat_timestamp(),
        )
        # Senders display their own message from this broadcast
        self.hub.broadcast(room.member_ids(), "newChatMessage", message.to_wire())
        logger.debug(f"Chat message from {session.connection_id} relayed in room {room.id}")
        return True
