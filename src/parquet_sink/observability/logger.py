import logging
import json
import sys
import time
import os

class _C:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    CYAN = "\033[36m"


def _use_color() -> bool:
    # Color only if explicitly enabled and terminal supports it.
    return os.getenv("LOG_COLOR", "0") == "1" and sys.stdout.isatty()

def _event_color(event_type: str) -> str:
    et = (event_type or "").upper()
    if et.endswith(("FAILED", "ABORTED")):
        return _C.RED
    if et.endswith("INITIALIZED"):
        return _C.CYAN
    return _C.GREEN

def get_logger():
    logger = logging.getLogger("parquet_sink")
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter('%(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False
    return logger

logger = get_logger()

# Structured Log Event
def log_event(event_type: str, payload: dict):
    record = {"event_type": event_type, **payload}
    text = json.dumps(record, default=str)

    if _use_color():
        color = _event_color(event_type)
        logger.info(f"{color}{text}{_C.RESET}")
    else:
        logger.info(text)

# Timer Utility
class RequestTimer:
    """
    Simple execution timer.
    """
    def __init__(self):
        self.start_time = time.time()

    def duration(self):
        return round(time.time() - self.start_time, 4)
