from datetime import datetime

from fastapi import APIRouter, HTTPException

from backend import room_registry
from logging_config import get_logger
from schemas.rooms import RoomDetailsResponse, RoomsSummaryResponse

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("", response_model=RoomsSummaryResponse)
async def get_rooms_summary():
    active_rooms = await room_registry.room_count()
    logger.debug(f"Rooms summary requested: {active_rooms} active")
    return RoomsSummaryResponse(active_rooms=active_rooms)


@rooms_router.get("/{room_code}", response_model=RoomDetailsResponse)
async def get_room_details(room_code: str):
    """
    Read-only view of an active room.

    Returns:
    - room_code: 6-digit room code
    - created_at / expires_at: ISO timestamps; rooms are swept once past expires_at
    - viewer_count: number of viewers currently joined
    - has_streamer: whether the streamer is still connected
    """
    room = await room_registry.get_room(room_code)
    if not room:
        logger.info(f"Room details failed: Room {room_code} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomDetailsResponse(
        room_code=room.code,
        created_at=datetime.fromtimestamp(room.created_at).isoformat(),
        expires_at=datetime.fromtimestamp(room.created_at + room_registry.room_ttl).isoformat(),
        viewer_count=room.viewer_count,
        has_streamer=room.streamer_id is not None,
    )
