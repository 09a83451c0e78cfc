import math
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round to `ndigits` with halves going up (round() rounds half to even).
    Example: round_half_up(0.25, 1) -> 0.3
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def seconds_to_hours(total_seconds: float, ndigits: int = 1) -> float:
    """
    Convert a duration in seconds -> hours rounded to `ndigits`.
    Example: 27000 -> 7.5
    """
    return round_half_up(total_seconds / 3600, ndigits)

