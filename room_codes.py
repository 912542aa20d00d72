import random
from typing import Container

from constants import ROOM_CODE_LENGTH, ROOM_CODE_MAX_ATTEMPTS
from logging_config import get_logger

logger = get_logger(__name__)

_CODE_SPACE = 10 ** ROOM_CODE_LENGTH


class RoomCodeExhausted(RuntimeError):
    """Raised when no free room code could be drawn. Indicates a corrupted registry."""


def generate_room_code(existing: Container[str], max_attempts: int = ROOM_CODE_MAX_ATTEMPTS, rng=random) -> str:
    """Draw a uniform random fixed-width decimal code not present in ``existing``."""
    for attempt in range(1, max_attempts + 1):
        code = str(rng.randrange(_CODE_SPACE)).zfill(ROOM_CODE_LENGTH)
        if code not in existing:
            if attempt > 1:
                logger.debug(f"Room code {code} drawn after {attempt} attempts")
            return code
    logger.critical(f"Could not draw a free room code after {max_attempts} attempts")
    raise RoomCodeExhausted(f"No free room code after {max_attempts} attempts")
