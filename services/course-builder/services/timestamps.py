"""
Timestamp formatting helpers shared by segment titles and the preview pages.
"""
import math


def format_timestamp(seconds: float) -> str:
    """
    Format seconds as M:SS, or H:MM:SS once the hour mark is reached.

    >>> format_timestamp(75)
    '1:15'
    >>> format_timestamp(3725)
    '1:02:05'
    """
    total = max(0, math.floor(seconds or 0))
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_duration(seconds: float) -> str:
    """Format a duration as M:SS without rolling minutes into hours."""
    total = max(0, math.floor(seconds or 0))
    return f"{total // 60}:{total % 60:02d}"
