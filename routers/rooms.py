from fastapi import APIRouter, HTTPException, Request

from coordinator import RoomCoordinator
from logging_config import get_logger
from schemas.rooms import HealthResponse, MemberInfo, RoomDetailsResponse

logger = get_logger(__name__)

rooms_router = APIRouter(tags=["rooms"])


def get_coordinator(request: Request) -> RoomCoordinator:
    return request.app.state.coordinator


@rooms_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    coordinator = get_coordinator(request)
    return HealthResponse(status="ok", rooms=len(coordinator.registry), connections=len(coordinator.hub))


@rooms_router.get("/rooms/{room_id}")
async def get_room_details(room_id: str, request: Request):
    """
    Get the current state of a live room.

    Returns:
    - roomId: Room identifier
    - hostConnectionId: Connection id of the room's creator
    - videoUrl, videoTime, videoState: Last known playback snapshot
    - memberCount: Number of members currently in the room
    - members: Members in join order
    """
    client_host = request.client.host if request.client else "unknown"
    logger.info(f"Room details request for {room_id} from {client_host}")

    room = get_coordinator(request).registry.get_room(room_id)
    if room is None:
        logger.warning(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    details = RoomDetailsResponse(
        room_id=room.id,
        host_connection_id=room.host_connection_id,
        video_url=room.video_url,
        video_time=room.video_time,
        video_state=room.video_state,
        member_count=len(room.members),
        members=[MemberInfo.from_member(member) for member in room.members],
    )
    return details.to_wire()
