import json
import logging
import os
from datetime import datetime

DEBUG_MODE = os.environ.get("CLINIC_DEBUG_MODE", "False").lower() == "true"

logger = logging.getLogger("clinic")


def log_debug(event: str, data: dict):
    """
    Logs structured debug info if enabled.
    """
    if not DEBUG_MODE:
        return

    entry = {
        "timestamp": datetime.now().isoformat(),
        "event": event,
        "data": data,
    }
    logger.debug("[CLINIC DEBUG] %s", json.dumps(entry, indent=2, default=str))


def log_error(event: str, exc: BaseException, data: dict | None = None):
    """
    Logs a failure that is reported to the user as a notice, never raised.
    """
    entry = {
        "timestamp": datetime.now().isoformat(),
        "event": event,
        "error": f"{type(exc).__name__}: {exc}",
        "data": data or {},
    }
    logger.error("[CLINIC ERROR] %s", json.dumps(entry, default=str))


def configure_logging(debug: bool = False):
    global DEBUG_MODE
    DEBUG_MODE = DEBUG_MODE or debug
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.setLevel(logging.DEBUG if DEBUG_MODE else logging.INFO)
