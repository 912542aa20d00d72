from typing import Any

from errors import StreamerGone, TargetNotFound
from events import SIGNAL, STREAMER_TARGET
from logging_config import get_logger
from schemas.signaling import SignalEvent

logger = get_logger(__name__)


def resolve_target(room, target: str) -> str:
    """Map a signaling target ("phone" or a viewer id) to a connection id in ``room``."""
    if target == STREAMER_TARGET:
        if room.streamer_id is None:
            raise StreamerGone(room.code)
        return room.streamer_id
    if target not in room.viewers:
        raise TargetNotFound(room.code, f"Target {target} not found")
    return target


def relay(room, from_id: str, target: str, payload: Any, emitter) -> bool:
    """Forward an opaque signaling payload to the addressed peer.

    Raises StreamerGone / TargetNotFound when the target is not in the room.
    Delivery itself is fire-and-forget: the return value only says whether the
    message was queued for the destination.
    """
    destination = resolve_target(room, target)
    envelope = SignalEvent(sender=from_id, signal=payload).dump()
    queued = emitter.emit(destination, SIGNAL, envelope)
    logger.debug(f"Relayed signal in room {room.code} from {from_id} to {destination} (queued={queued})")
    return queued
