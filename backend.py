import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from constants import ROOM_CODE_MAX_ATTEMPTS, ROOM_TTL_SECONDS
from errors import RoomNotFound, SignalingError, StreamerGone
from events import MONITOR_JOINED, MONITOR_LEFT, PHONE_DISCONNECTED
from logging_config import get_logger
from room_codes import generate_room_code
from schemas.signaling import MonitorJoinedEvent, MonitorLeftEvent
from signaling import relay
from transport import connection_manager

logger = get_logger(__name__)


@dataclass
class Viewer:
    connection_id: str
    joined_at: float


@dataclass
class Room:
    code: str
    streamer_id: Optional[str]
    created_at: float
    viewers: Dict[str, Viewer] = field(default_factory=dict)
    # Bumped on every transition to zero viewers; lets a grace timer tell
    # whether the room was refilled and emptied again after it was scheduled.
    empty_generation: int = 0

    @property
    def viewer_count(self) -> int:
        return len(self.viewers)

    @property
    def joinable(self) -> bool:
        return self.streamer_id is not None


class RoomRegistry:
    """In-memory table of active rooms.

    All reads and writes go through ``self.lock``. Nothing awaits while holding
    it; outbound events are queued with the emitter's non-blocking ``emit``.
    """

    def __init__(self, emitter, room_ttl: float = ROOM_TTL_SECONDS, clock: Callable[[], float] = time.time,
                 max_code_attempts: int = ROOM_CODE_MAX_ATTEMPTS, rng=None):
        self.rooms: Dict[str, Room] = {}
        self.lock = asyncio.Lock()
        self.emitter = emitter
        self.room_ttl = room_ttl
        self.clock = clock
        self.max_code_attempts = max_code_attempts
        self.rng = rng
        # Called as on_room_empty(code, generation) when a room loses its last viewer
        self.on_room_empty: Optional[Callable[[str, int], Any]] = None
        logger.info(f"Initializing RoomRegistry with room TTL {room_ttl} seconds")

    # Registry

    async def create_room(self, streamer_id: str) -> str:
        async with self.lock:
            code = generate_room_code(self.rooms, self.max_code_attempts, rng=self.rng or random)
            self.rooms[code] = Room(code=code, streamer_id=streamer_id, created_at=self.clock())
            logger.info(f"Room {code} created by streamer {streamer_id} (active rooms: {len(self.rooms)})")
            return code

    async def get_room(self, code: str) -> Optional[Room]:
        async with self.lock:
            return self.rooms.get(code)

    async def delete_room(self, code: str, notify_viewers: bool = False) -> bool:
        async with self.lock:
            return self._delete(code, notify_viewers)

    async def room_count(self) -> int:
        async with self.lock:
            return len(self.rooms)

    def _require(self, code: str) -> Room:
        room = self.rooms.get(code)
        if room is None:
            raise RoomNotFound(code)
        return room

    def _delete(self, code: str, notify_viewers: bool) -> bool:
        room = self.rooms.pop(code, None)
        if room is None:
            logger.debug(f"Delete skipped: room {code} not found")
            return False
        if notify_viewers:
            for viewer_id in room.viewers:
                self.emitter.emit(viewer_id, PHONE_DISCONNECTED)
            logger.debug(f"Notified {room.viewer_count} viewers of room {code} that the streamer is gone")
        logger.info(f"Room {code} deleted (active rooms: {len(self.rooms)})")
        return True

    # Session tracking

    async def join_room(self, code: str, viewer_id: str) -> int:
        """Add a viewer and tell the streamer. Returns the new viewer count."""
        async with self.lock:
            room = self._require(code)
            # Streamer loss deletes the room under this same lock, so this only
            # guards rooms whose streamer_id was cleared some other way.
            if not room.joinable:
                raise StreamerGone(code)
            if viewer_id == room.streamer_id:
                raise SignalingError(code, "Cannot join your own room")
            if viewer_id in room.viewers:
                logger.debug(f"Viewer {viewer_id} already in room {code}")
                return room.viewer_count
            room.viewers[viewer_id] = Viewer(connection_id=viewer_id, joined_at=self.clock())
            total = room.viewer_count
            self.emitter.emit(
                room.streamer_id,
                MONITOR_JOINED,
                MonitorJoinedEvent(monitor_id=viewer_id, room_code=code, total_viewers=total).dump(),
            )
            logger.info(f"Viewer {viewer_id} joined room {code} ({total} viewers)")
            return total

    async def leave_room(self, code: str, connection_id: str):
        async with self.lock:
            room = self.rooms.get(code)
            if room is None:
                logger.debug(f"Leave ignored: room {code} not found")
                return
            if connection_id == room.streamer_id:
                logger.info(f"Streamer {connection_id} left room {code}")
                self._delete(code, notify_viewers=True)
                return
            self._remove_viewer(room, connection_id)

    def _remove_viewer(self, room: Room, viewer_id: str) -> bool:
        if room.viewers.pop(viewer_id, None) is None:
            return False
        total = room.viewer_count
        if room.streamer_id is not None:
            self.emitter.emit(
                room.streamer_id,
                MONITOR_LEFT,
                MonitorLeftEvent(monitor_id=viewer_id, total_viewers=total).dump(),
            )
        logger.info(f"Viewer {viewer_id} left room {room.code} ({total} viewers)")
        if total == 0:
            room.empty_generation += 1
            if self.on_room_empty is not None:
                self.on_room_empty(room.code, room.empty_generation)
        return True

    async def handle_disconnect(self, connection_id: str):
        """Drop a closed connection from every room: rooms it streams are torn down, rooms it views are left."""
        async with self.lock:
            streamed = [code for code, room in self.rooms.items() if room.streamer_id == connection_id]
            for code in streamed:
                logger.info(f"Streamer {connection_id} disconnected from room {code}")
                self._delete(code, notify_viewers=True)
            for room in list(self.rooms.values()):
                self._remove_viewer(room, connection_id)

    # Signaling

    async def relay_signal(self, code: str, from_id: str, target: str, payload: Any) -> bool:
        """Best-effort relay. Unknown rooms or targets are logged and dropped."""
        async with self.lock:
            try:
                room = self._require(code)
                return relay(room, from_id, target, payload, self.emitter)
            except SignalingError as e:
                logger.warning(f"Dropping signal from {from_id} to {target}: {e}")
                return False

    # Lifecycle

    async def expire_if_empty(self, code: str, generation: int) -> bool:
        """Delete ``code`` if it is still empty since the transition numbered ``generation``."""
        async with self.lock:
            room = self.rooms.get(code)
            if room is None:
                return False
            if room.viewer_count or room.empty_generation != generation:
                logger.debug(f"Grace check for room {code} is stale, keeping it")
                return False
            logger.info(f"Room {code} had no viewers for the grace period")
            return self._delete(code, notify_viewers=False)

    async def sweep_expired(self) -> List[str]:
        """Tear down every room older than the TTL. Returns the deleted codes."""
        async with self.lock:
            now = self.clock()
            expired = [code for code, room in self.rooms.items() if now - room.created_at >= self.room_ttl]
            for code in expired:
                logger.info(f"Room {code} exceeded TTL of {self.room_ttl} seconds")
                self._delete(code, notify_viewers=True)
            return expired


room_registry = RoomRegistry(connection_manager)
