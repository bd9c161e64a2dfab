"""Timestamp formatting utilities."""

from datetime import date, datetime


def now() -> str:
    """Compact local timestamp for directory names (e.g., "20251114_123456")."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """ISO 8601 timestamp with microseconds, used for diagnostic entries."""
    return datetime.now().isoformat()


def format_document_date(day: date) -> str:
    """
    Format a date the way \\today prints it.

    Example:
        format_document_date(date(2025, 11, 14))
        # "November 14, 2025"
    """
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def format_timestamp(iso_timestamp: str) -> str:
    """
    Format ISO 8601 timestamp as a clock time for diagnostic display.

    Returns the original string if it cannot be parsed.

    Example:
        format_timestamp("2025-11-13T18:45:40.572549")
        # "18:45:40"
    """
    try:
        return datetime.fromisoformat(iso_timestamp).strftime("%H:%M:%S")
    except (ValueError, TypeError):
        # Return original if parsing fails
        return iso_timestamp
