import time
from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


# ---------------------------------------- #


def format_duration(ms: int) -> str:
    """
    Render elapsed milliseconds as HH:MM:SS.

    Sub-second precision is floored. Hours are not wrapped at 24.
    """
    seconds = max(0, int(ms)) // 1000
    minutes = seconds // 60
    hours = minutes // 60
    return f"{hours:02d}:{minutes % 60:02d}:{seconds % 60:02d}"


# ---------------------------------------- #


def format_clock_time(timestamp_ms: int, millis: bool = False) -> str:
    dt = datetime.fromtimestamp(timestamp_ms / 1000.0)
    if millis:
        return dt.strftime("%H:%M:%S.") + f"{int(timestamp_ms) % 1000:03d}"
    return dt.strftime("%H:%M:%S")


# ---------------------------------------- #


def iso_timestamp(timestamp_ms: int) -> str:
    # Integer arithmetic keeps the millisecond field exact.
    dt = _EPOCH + timedelta(milliseconds=int(timestamp_ms))
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


# ---------------------------------------- #


def iso_date(timestamp_ms: int) -> str:
    return iso_timestamp(timestamp_ms).split("T")[0]
