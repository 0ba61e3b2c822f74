import asyncio

import pytest
from fastapi.testclient import TestClient

from app import create_app
from backend import RoomRegistry
from coordinator import RoomCoordinator
from sessions import ConnectionHub


def drain(hub: ConnectionHub, connection_id: str) -> list:
    """Everything queued for a connection so far, oldest first."""
    queue = hub.outbound(connection_id)
    frames = []
    while queue is not None:
        try:
            frame = queue.get_nowait()
        except asyncio.QueueEmpty:
            break
        if frame is not None:
            frames.append(frame)
    return frames


def events(hub: ConnectionHub, connection_id: str) -> list:
    return [frame["event"] for frame in drain(hub, connection_id)]


@pytest.fixture
def hub():
    return ConnectionHub()


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def coordinator(registry, hub):
    return RoomCoordinator(registry=registry, hub=hub)


@pytest.fixture
def room_of(coordinator, hub):
    """Build a room with the given usernames; returns (room_id, sessions) with queues drained."""
    def build(*usernames):
        sessions = [coordinator.connect() for _ in usernames]
        ack = coordinator.handle(sessions[0], {"event": "createRoom", "data": {"username": usernames[0]}, "id": 1})
        room_id = ack["data"]["roomId"]
        for session, username in zip(sessions[1:], usernames[1:]):
            coordinator.handle(session, {"event": "joinRoom", "data": {"roomId": room_id, "username": username}})
        for session in sessions:
            drain(hub, session.connection_id)
        return room_id, sessions
    return build


@pytest.fixture
def client():
    app = create_app(RoomCoordinator(), static_dir=None)
    with TestClient(app) as test_client:
        yield test_client
