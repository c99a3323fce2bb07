import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "public")

# Room codes are 4 digits, drawn uniformly from this range
ROOM_CODE_MIN = 1000
ROOM_CODE_MAX = 9999
ROOM_CODE_RANDOM_ATTEMPTS = 50

ROOM_MAX_AGE_SECONDS = 30 * 60
SWEEP_INTERVAL_SECONDS = 10 * 60
