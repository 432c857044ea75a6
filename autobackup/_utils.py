import logging
import time
import uuid
from datetime import datetime, timezone

logger = logging.getLogger("autobackup")


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def short_id(length: int = 8) -> str:
    """Random url-safe identifier used as the backup record id."""
    return uuid.uuid4().hex[:length]


def iso_timestamp(epoch_ms: int) -> str:
    """Render epoch millis the way a JS ``Date.toISOString()`` would."""
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{epoch_ms % 1000:03d}Z"


def clamp(value, lower: int, upper: int, default: int) -> int:
    """Coerce ``value`` to an int inside ``[lower, upper]``.

    Anything that is not a usable number falls back to ``default``.
    """
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return max(lower, min(upper, number))


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    index = 0
    value = float(size)
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"
