"""
Clock adapter.

Every order-window rule reads the current instant through a ServiceClock,
which normalizes it to the service timezone. Services take the clock as a
constructor argument so callers (and tests) can pin "now".
"""

from datetime import date, datetime
from typing import Callable, Optional, Union

import pytz
from django.utils import timezone


def system_now() -> datetime:
    """Current UTC instant from Django."""
    return timezone.now()


class ServiceClock:
    """Reads "now" and converts datetimes into the service timezone."""

    def __init__(self, tz_name: str, now_func: Optional[Callable[[], datetime]] = None):
        self.tz = pytz.timezone(tz_name)
        self._now_func = now_func

    def localize(self, dt: datetime) -> datetime:
        """
        Express a datetime in the service timezone.

        Naive datetimes are read as service-local wall time.
        """
        if dt.tzinfo is None:
            return self.tz.localize(dt)
        return dt.astimezone(self.tz)

    def now(self) -> datetime:
        raw = self._now_func() if self._now_func is not None else system_now()
        return self.localize(raw)

    def today(self) -> date:
        return self.now().date()

    def to_service_date(self, value: Union[date, datetime]) -> date:
        """Calendar date of a date or datetime, in the service timezone."""
        if isinstance(value, datetime):
            return self.localize(value).date()
        return value
