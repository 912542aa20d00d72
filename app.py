import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from backend import room_registry
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, STATIC_DIR
from events import CONNECTED
from handlers import handle_message, send_error
from logging_config import get_logger, setup_logging
from reaper import LifecycleReaper
from routers.rooms import rooms_router
from schemas.signaling import ConnectedEvent
from transport import connection_manager

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

reaper = LifecycleReaper(room_registry)


@asynccontextmanager
async def lifespan(app: FastAPI):
    reaper.start()
    yield
    await reaper.stop()


app = FastAPI(title="Room Signaling Relay", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms_router)

logger.info("FastAPI application initialized")


@app.get("/health")
async def health():
    return {"ok": True}


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Signaling socket. Frames are JSON objects of the form {"event": ..., "data": ...}."""
    await websocket.accept()
    connection_id = connection_manager.connect(websocket)
    logger.info(f"Client connected: {connection_id}")
    connection_manager.emit(connection_id, CONNECTED, ConnectedEvent(connection_id=connection_id).dump())

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"Client disconnected: {connection_id}")
                break
            raw = message.get("text")
            if raw is None:
                logger.warning(f"Non-text frame from connection {connection_id}")
                send_error(connection_manager, connection_id, "Invalid message")
                continue
            await handle_message(room_registry, connection_manager, connection_id, raw)
    finally:
        await room_registry.handle_disconnect(connection_id)
        await connection_manager.disconnect(connection_id)


# Mounted last so it does not shadow the routes above
if os.path.isdir(STATIC_DIR):
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
    logger.info(f"Serving static files from {STATIC_DIR}")
