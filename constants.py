import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

# Room lifecycle (seconds)
ROOM_TTL_SECONDS = int(os.getenv("ROOM_TTL_SECONDS", 60 * 60))
SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", 30 * 60))
EMPTY_ROOM_GRACE_SECONDS = float(os.getenv("EMPTY_ROOM_GRACE_SECONDS", 30))

ROOM_CODE_LENGTH = 6
ROOM_CODE_MAX_ATTEMPTS = int(os.getenv("ROOM_CODE_MAX_ATTEMPTS", 100))

# Per-connection outbound buffer; messages beyond this are dropped
OUTBOUND_QUEUE_SIZE = int(os.getenv("OUTBOUND_QUEUE_SIZE", 256))

STATIC_DIR = os.getenv("STATIC_DIR", "public")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
