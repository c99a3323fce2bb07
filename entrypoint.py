import uvicorn
from constants import HOST, LOG_FILE, LOG_LEVEL, PORT, RELOAD
from logging_config import setup_logging

# Setup logging before importing app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

from app import app
from logging_config import get_logger

logger = get_logger(__name__)

if __name__ == "__main__":
    logger.info(f"Starting pairing server on {HOST}:{PORT}")
    logger.info(f"   Game: http://localhost:{PORT}/game")
    logger.info(f"   Controller: http://localhost:{PORT}/controller")
    uvicorn.run("app:app", host=HOST, port=PORT, reload=RELOAD)
