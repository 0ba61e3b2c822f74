from typing import Any

from backend import RoomRegistry
from logging_config import get_logger
from models import SignalKind
from schemas.rooms import SignalEvent
from sessions import ConnectionHub, ConnectionSession

logger = get_logger(__name__)


class SignalingRelay:
    """Forwards WebRTC offers, answers and ICE candidates to one connection.

    Payloads are passed through untouched.
    """

    def __init__(self, registry: RoomRegistry, hub: ConnectionHub):
        self.registry = registry
        self.hub = hub

    def forward(self, session: ConnectionSession, kind: SignalKind, target_connection_id: str, payload: Any) -> bool:
        kind = SignalKind(kind)
        if self.registry.room_for(session) is None:
            logger.debug(f"Ignoring {kind.value} from {session.connection_id}: not in a room")
            return False
        if not self.hub.is_connected(target_connection_id):
            logger.debug(f"Dropping {kind.value} from {session.connection_id}: {target_connection_id} is not connected")
            return False

        event = SignalEvent(sender_connection_id=session.connection_id, payload=payload)
        delivered = self.hub.send(target_connection_id, kind.value, event.to_wire())
        logger.debug(f"Relayed {kind.value} {session.connection_id} -> {target_connection_id}")
        return delivered
