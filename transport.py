import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import WebSocket

from constants import OUTBOUND_QUEUE_SIZE
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Connection:
    id: str
    websocket: WebSocket
    queue: asyncio.Queue
    writer: Optional[asyncio.Task] = None
    sent: int = 0


class ConnectionManager:
    """Tracks live WebSocket connections and delivers outbound events.

    ``emit`` never awaits: each connection has its own bounded queue drained by
    a writer task, so a slow or dead peer only backs up its own queue.
    """

    def __init__(self, queue_size: int = OUTBOUND_QUEUE_SIZE):
        self.connections: Dict[str, Connection] = {}
        self.queue_size = queue_size
        logger.info(f"Initializing ConnectionManager with queue size {queue_size}")

    def connect(self, websocket: WebSocket) -> str:
        """Register an accepted websocket and start its writer. Returns the new connection id."""
        connection_id = str(uuid.uuid4())
        conn = Connection(id=connection_id, websocket=websocket, queue=asyncio.Queue(maxsize=self.queue_size))
        conn.writer = asyncio.create_task(self._write_loop(conn))
        self.connections[connection_id] = conn
        logger.debug(f"Registered connection {connection_id} (total: {len(self.connections)})")
        return connection_id

    async def disconnect(self, connection_id: str):
        conn = self.connections.pop(connection_id, None)
        if not conn:
            return
        if conn.writer and not conn.writer.done():
            conn.writer.cancel()
            try:
                await conn.writer
            except asyncio.CancelledError:
                pass
        logger.debug(f"Unregistered connection {connection_id} after {conn.sent} messages (total: {len(self.connections)})")

    def emit(self, connection_id: str, event: str, data: Any = None) -> bool:
        """Queue ``event`` for one connection. Returns False if it was dropped."""
        conn = self.connections.get(connection_id)
        if not conn:
            logger.debug(f"Dropping {event} for unknown connection {connection_id}")
            return False
        try:
            conn.queue.put_nowait({"event": event, "data": data})
        except asyncio.QueueFull:
            logger.warning(f"Outbound queue full for connection {connection_id}, dropping {event}")
            return False
        return True

    async def _write_loop(self, conn: Connection):
        try:
            while True:
                message = await conn.queue.get()
                await conn.websocket.send_json(message)
                conn.sent += 1
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Peer is gone; the receive loop will notice and clean up
            logger.warning(f"Error sending to connection {conn.id}, stopping writer: {e}")


connection_manager = ConnectionManager()
