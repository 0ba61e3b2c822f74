import asyncio
import json
import os
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, STATIC_DIR
from coordinator import RoomCoordinator
from logging_config import get_logger, setup_logging
from routers.rooms import rooms_router

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


async def pump_outbound(websocket: WebSocket, queue: asyncio.Queue, connection_id: str):
    """Writer task: drain a connection's outbound queue onto its socket."""
    try:
        while True:
            message = await queue.get()
            if message is None:
                break
            await websocket.send_json(message)
    except Exception as e:
        # Socket went away mid-send; the receive loop sees the disconnect
        logger.debug(f"Stopped writing to connection {connection_id}: {e}")


def create_app(coordinator: Optional[RoomCoordinator] = None, static_dir: Optional[str] = STATIC_DIR) -> FastAPI:
    app = FastAPI(title="Watch Party")
    app.state.coordinator = coordinator if coordinator is not None else RoomCoordinator()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(rooms_router)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """One connection session: accept, read frames until the transport closes, then clean up."""
        coordinator: RoomCoordinator = app.state.coordinator
        await websocket.accept()
        session = coordinator.connect()
        connection_id = session.connection_id
        writer_task = asyncio.create_task(
            pump_outbound(websocket, coordinator.hub.outbound(connection_id), connection_id)
        )

        try:
            message_count = 0
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                message_count += 1
                logger.debug(f"Received message #{message_count} from connection {connection_id}")

                data = message.get("text")
                if data is None:
                    logger.warning(f"Ignoring binary message from connection {connection_id}")
                    coordinator.send_error(session, "Malformed message")
                    continue

                try:
                    frame = json.loads(data)
                except json.JSONDecodeError:
                    logger.warning(f"Ignoring non-JSON message from connection {connection_id}")
                    coordinator.send_error(session, "Malformed message")
                    continue

                coordinator.handle(session, frame)
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected normally for connection {connection_id}")
        except Exception as e:
            logger.error(f"WebSocket error for connection {connection_id}: {e}", exc_info=True)
        finally:
            coordinator.disconnect(session)
            writer_task.cancel()
            try:
                await writer_task
            except asyncio.CancelledError:
                pass

    if static_dir and os.path.isdir(static_dir):
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info(f"Serving client bundle from {static_dir}")

    logger.info("FastAPI application initialized")
    return app


app = create_app()
