"""
Timezone utilities for the tutoring platform.

Session dates and slot times are wall-clock values in the business timezone,
so every "today" comparison in the engine goes through these helpers.
"""

from datetime import date, datetime

import pytz

from .config import settings


def get_business_timezone() -> pytz.BaseTzInfo:
    """Return the configured business timezone."""
    return pytz.timezone(settings.business_timezone)


def get_business_now() -> datetime:
    """
    Get current datetime in the business timezone.

    Returns:
        Timezone-aware datetime
    """
    return datetime.now(get_business_timezone())


def get_business_today() -> date:
    """
    Get 'today' in the business timezone.

    Returns:
        Today's date where the sessions take place
    """
    return get_business_now().date()
