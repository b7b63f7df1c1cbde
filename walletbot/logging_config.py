# walletbot/logging_config.py
import logging
import os
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()    # INFO in production

LOGS_DIR = Path(os.getenv("LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))
LOGS_DIR.mkdir(parents=True, exist_ok=True)

LOG_FILE = LOGS_DIR / "walletbot.log"

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(),
        TimedRotatingFileHandler(LOG_FILE, when="midnight", interval=1, backupCount=30, encoding='utf-8'),
    ],
    force=True,    # replaces the handlers uvicorn installs
)

# httpx logs every request at INFO; the API clients log what matters
for noisy in ("httpx", "httpcore"):
    logging.getLogger(noisy).setLevel(logging.WARNING)
