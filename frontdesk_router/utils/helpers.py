from typing import Any, Dict, Iterable, Optional
from datetime import datetime, timezone

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> int:
    """Convert an ``HH:mm`` string to minutes after midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def window_minutes(start_time: str, end_time: str) -> int:
    """Length of a daily window in minutes, wrapping past midnight when needed."""
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if end > start:
        return end - start
    return MINUTES_PER_DAY - start + end


def format_datetime(dt: Optional[datetime]) -> str:
    """Format datetime to readable string."""
    if not dt:
        return "N/A"
    return dt.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC, None means now."""
    if not value:
        return datetime.now(timezone.utc)
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def truncate_string(text: str, max_length: int = 50) -> str:
    """Truncate string to max length with ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def find_keyword(text: str, keywords: Iterable[str]) -> Optional[str]:
    """Return the first keyword found in text (case-insensitive substring match)."""
    if not text:
        return None
    lowered = text.casefold()
    for keyword in keywords:
        if keyword and keyword.casefold() in lowered:
            return keyword
    return None


def parse_key_values(pairs: Iterable[str]) -> Dict[str, Any]:
    """Parse ``key=value`` pairs from the command line."""
    result: Dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Expected key=value, got '{pair}'")
        key, value = pair.split("=", 1)
        result[key.strip()] = value.strip()
    return result
