"""Clock arithmetic on "HH:MM" values expressed as minutes from midnight."""

from __future__ import annotations

MINUTES_PER_DAY = 24 * 60
LAST_MINUTE_OF_DAY = MINUTES_PER_DAY - 1


def parse_clock(value: str | None) -> int | None:
    """Parse "HH:MM" or "HH:MM:SS" into minutes from midnight.

    Returns None for empty or malformed input instead of raising, so callers
    can apply their own fallback.
    """
    if not value:
        return None
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if hours < 0 or minutes < 0 or minutes > 59:
        return None
    return hours * 60 + minutes


def format_clock(total_minutes: int | float) -> str:
    """Format minutes from midnight as "HH:MM", clamped to the same day."""
    clamped = int(max(0, min(total_minutes, LAST_MINUTE_OF_DAY)))
    hours, minutes = divmod(clamped, 60)
    return f"{hours:02d}:{minutes:02d}"


def normalise_clock(value: str | None) -> str | None:
    """Strip seconds from a stored clock value."""
    if not value:
        return None
    return value[:5]


def add_minutes(value: str | None, minutes: int) -> str | None:
    start = parse_clock(value)
    if start is None:
        return None
    return format_clock(start + minutes)
