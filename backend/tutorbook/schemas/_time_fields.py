"""Shared parsing for wall-clock time fields."""

from datetime import time


def parse_wall_clock(value: object) -> object:
    """Accept "HH:MM" or "HH:MM:SS" strings; pass other values through to pydantic."""
    if isinstance(value, str):
        candidate = value.strip()
        try:
            parsed = time.fromisoformat(candidate)
        except ValueError:
            raise ValueError(f"Invalid time format: {value}. Expected HH:MM format.")
        return parsed.replace(tzinfo=None)
    return value
