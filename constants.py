import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
STATIC_DIR = os.getenv("STATIC_DIR", "public")

ROOM_ID_LENGTH = int(os.getenv("ROOM_ID_LENGTH", 6))
OUTBOUND_QUEUE_SIZE = int(os.getenv("OUTBOUND_QUEUE_SIZE", 256))
DEFAULT_USERNAME = os.getenv("DEFAULT_USERNAME", "Guest")

# "3:04:05 PM"
CHAT_TIMESTAMP_FORMAT = "%I:%M:%S %p"

# Seconds of local/remote drift tolerated on a play event before a receiver reseeks
DRIFT_THRESHOLD = 0.5
