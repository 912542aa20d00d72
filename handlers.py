import json

from pydantic import ValidationError

from errors import SignalingError
from events import CREATE_ROOM, ERROR, JOIN_ROOM, LEAVE_ROOM, ROOM_CREATED, ROOM_JOINED, SIGNAL
from logging_config import get_logger
from schemas.signaling import ErrorEvent, InboundMessage, RoomCodeEvent, RoomCodeRequest, SignalRequest

logger = get_logger(__name__)


def _room_code_request(data) -> RoomCodeRequest:
    # join-room / leave-room accept either a bare code or {"roomCode": ...}
    if isinstance(data, str):
        return RoomCodeRequest(room_code=data)
    return RoomCodeRequest.model_validate(data)


def send_error(emitter, connection_id: str, message: str):
    emitter.emit(connection_id, ERROR, ErrorEvent(message=message).dump())


async def handle_message(registry, emitter, connection_id: str, raw: str):
    """Parse one inbound frame and apply it to the registry."""
    try:
        message = InboundMessage.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Invalid frame from connection {connection_id}: {e}")
        send_error(emitter, connection_id, "Invalid message")
        return

    event = message.event
    logger.debug(f"Received {event} from connection {connection_id}")

    if event == CREATE_ROOM:
        code = await registry.create_room(connection_id)
        emitter.emit(connection_id, ROOM_CREATED, RoomCodeEvent(room_code=code).dump())

    elif event == JOIN_ROOM:
        try:
            request = _room_code_request(message.data)
        except ValidationError as e:
            logger.warning(f"Invalid join-room from connection {connection_id}: {e}")
            send_error(emitter, connection_id, "Invalid message")
            return
        try:
            await registry.join_room(request.room_code, connection_id)
        except SignalingError as e:
            logger.info(f"Join room {request.room_code} rejected for {connection_id}: {e.message}")
            send_error(emitter, connection_id, e.message)
            return
        emitter.emit(connection_id, ROOM_JOINED, RoomCodeEvent(room_code=request.room_code).dump())

    elif event == SIGNAL:
        try:
            request = SignalRequest.model_validate(message.data)
        except ValidationError as e:
            logger.warning(f"Dropping malformed signal from connection {connection_id}: {e}")
            return
        await registry.relay_signal(request.room_code, connection_id, request.target, request.signal)

    elif event == LEAVE_ROOM:
        try:
            request = _room_code_request(message.data)
        except ValidationError as e:
            logger.warning(f"Invalid leave-room from connection {connection_id}: {e}")
            send_error(emitter, connection_id, "Invalid message")
            return
        await registry.leave_room(request.room_code, connection_id)

    else:
        logger.warning(f"Unknown event {event} from connection {connection_id}")
        send_error(emitter, connection_id, f"Unknown event: {event}")
