import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from constants import OUTBOUND_QUEUE_SIZE
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ConnectionSession:
    """Identity attached to one live connection."""
    connection_id: str
    username: Optional[str] = None
    room_id: Optional[str] = None


class ConnectionHub:
    """Live connections and their outbound queues.

    Sending never blocks: events are put on the target's bounded queue and a
    writer task owned by the transport drains it. A full queue drops the
    event for that receiver only.
    """

    def __init__(self, queue_size: int = OUTBOUND_QUEUE_SIZE):
        self.queue_size = queue_size
        # Format: {connection_id: session}
        self._sessions: Dict[str, ConnectionSession] = {}
        # Format: {connection_id: queue of outbound frames}
        self._queues: Dict[str, asyncio.Queue] = {}

    def open(self) -> ConnectionSession:
        connection_id = uuid.uuid4().hex
        session = ConnectionSession(connection_id=connection_id)
        self._sessions[connection_id] = session
        self._queues[connection_id] = asyncio.Queue(maxsize=self.queue_size)
        logger.debug(f"Opened connection {connection_id} (live connections: {len(self._sessions)})")
        return session

    def close(self, connection_id: str) -> Optional[ConnectionSession]:
        """Forget a connection. Returns the session the first time only."""
        session = self._sessions.pop(connection_id, None)
        queue = self._queues.pop(connection_id, None)
        if session is None:
            return None
        if queue is not None:
            try:
                # Wake the writer so it can stop
                queue.put_nowait(None)
            except asyncio.QueueFull:
                pass
        logger.debug(f"Closed connection {connection_id} (live connections: {len(self._sessions)})")
        return session

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._sessions

    def outbound(self, connection_id: str) -> Optional[asyncio.Queue]:
        return self._queues.get(connection_id)

    def send(self, connection_id: str, event: str, data: Any = None) -> bool:
        return self.push(connection_id, {"event": event, "data": data})

    def push(self, connection_id: str, frame: Dict[str, Any]) -> bool:
        """Queue a complete outbound frame for one connection."""
        event = frame.get("event")
        queue = self._queues.get(connection_id)
        if queue is None:
            logger.debug(f"Dropping {event} for {connection_id}: not connected")
            return False
        try:
            queue.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning(f"Outbound queue full for connection {connection_id}, dropping {event}")
            return False
        return True

    def broadcast(self, connection_ids: Iterable[str], event: str, data: Any = None) -> int:
        delivered = 0
        for connection_id in connection_ids:
            if self.send(connection_id, event, data):
                delivered += 1
        logger.debug(f"Queued {event} for {delivered} connections")
        return delivered

    def __len__(self) -> int:
        return len(self._sessions)
