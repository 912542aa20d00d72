from pydantic import BaseModel


class RoomDetailsResponse(BaseModel):
    room_code: str
    created_at: str
    expires_at: str
    viewer_count: int
    has_streamer: bool


class RoomsSummaryResponse(BaseModel):
    active_rooms: int
