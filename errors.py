class SignalingError(Exception):
    """Base class for per-request failures. ``message`` is what clients see."""

    message = "Signaling error"

    def __init__(self, room_code: str = None, message: str = None):
        self.room_code = room_code
        if message:
            self.message = message
        super().__init__(self.message if room_code is None else f"{self.message} (room {room_code})")


class RoomNotFound(SignalingError):
    message = "Room not found"


class StreamerGone(SignalingError):
    message = "Streamer disconnected"


class TargetNotFound(SignalingError):
    message = "Target not found"
