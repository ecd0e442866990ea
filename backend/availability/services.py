import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterator, List, Optional, Union

from .clock import ServiceClock
from .config import OrderWindowConfig, get_order_window_config
from .constants import WEEKDAY_NAMES, DateStatus

logger = logging.getLogger(__name__)


DateLike = Union[date, datetime]


class ServiceWindow:
    """
    Consecutive calendar dates starting at a given day (inclusive).

    Holds only the start and the horizon, so it can be iterated any number of
    times and never materializes more than one date at a time.
    """

    def __init__(self, start: date, horizon_days: int):
        if horizon_days <= 0:
            raise ValueError(f"horizon_days must be positive, got {horizon_days}")
        self.start = start
        self.horizon_days = horizon_days

    def __iter__(self) -> Iterator[date]:
        for offset in range(self.horizon_days + 1):
            yield self.start + timedelta(days=offset)

    def __len__(self) -> int:
        return self.horizon_days + 1

    def __contains__(self, value) -> bool:
        return isinstance(value, date) and self.start <= value <= self.end

    @property
    def end(self) -> date:
        return self.start + timedelta(days=self.horizon_days)

    def __repr__(self):
        return f"ServiceWindow({self.start.isoformat()}..{self.end.isoformat()})"


class AvailabilityService:
    """
    Order-window engine.

    Decides which day is currently taking orders and classifies any calendar
    date against it. Everything is evaluated in the service timezone and read
    through the injected clock, so results are a pure function of "now" and
    the ORDER_WINDOW configuration.
    """

    def __init__(self, config: Optional[OrderWindowConfig] = None, clock: Optional[ServiceClock] = None):
        self.config = config or get_order_window_config()
        self.clock = clock or ServiceClock(self.config.timezone)

    @classmethod
    def from_settings(cls, clock: Optional[ServiceClock] = None) -> 'AvailabilityService':
        return cls(config=get_order_window_config(), clock=clock)

    def _resolve_now(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return self.clock.now()
        return self.clock.localize(now)

    def is_service_weekday(self, day: DateLike) -> bool:
        return self.clock.to_service_date(day).weekday() in self.config.service_weekdays

    def next_service_day(self, after: date) -> date:
        """First open weekday strictly after the given date."""
        candidate = after + timedelta(days=1)
        # Terminates within 7 steps, config guarantees an open weekday
        while candidate.weekday() not in self.config.service_weekdays:
            candidate += timedelta(days=1)
        return candidate

    def active_service_day(self, now: Optional[datetime] = None) -> date:
        """
        The service day currently taking orders.

        Today while it is an open weekday before the cutoff hour, otherwise
        the next open weekday.
        """
        now = self._resolve_now(now)
        today = now.date()
        if today.weekday() in self.config.service_weekdays and now.hour < self.config.cutoff_hour:
            return today
        return self.next_service_day(today)

    def status_of(self, target: DateLike, now: Optional[datetime] = None) -> DateStatus:
        """
        Classify a date relative to now.

        The order of the checks matters: a closed today must not read as PAST,
        and the active day must win over every other status.
        """
        now = self._resolve_now(now)
        today_key = now.date()
        active_key = self.active_service_day(now)
        target_key = self.clock.to_service_date(target)

        if target_key == active_key:
            return DateStatus.ACTIVE
        if target_key == today_key:
            return DateStatus.TODAY_CLOSED
        if target_key < today_key:
            return DateStatus.PAST
        if target_key.weekday() not in self.config.service_weekdays:
            return DateStatus.WEEKEND
        return DateStatus.PREVIEW

    def is_orderable(self, status: DateStatus) -> bool:
        if status == DateStatus.ACTIVE:
            return True
        if status == DateStatus.PREVIEW:
            return self.config.preview_orderable
        return False

    def window_dates(self, horizon_days: Optional[int] = None, now: Optional[datetime] = None) -> ServiceWindow:
        """Dates from today through today + horizon_days, in ascending order."""
        if horizon_days is None:
            horizon_days = self.config.calendar_horizon_days
        now = self._resolve_now(now)
        return ServiceWindow(now.date(), horizon_days)

    def calendar(self, horizon_days: Optional[int] = None, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        now = self._resolve_now(now)
        entries = []
        for day in self.window_dates(horizon_days, now=now):
            status = self.status_of(day, now=now)
            entries.append(
                {
                    'date': day,
                    'status': status,
                    'label': self.display_date(day),
                    'is_orderable': self.is_orderable(status),
                    'is_service_day': self.is_service_weekday(day),
                }
            )
        return entries

    def active_order_info(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Snapshot of the current order window for API responses."""
        now = self._resolve_now(now)
        active_day = self.active_service_day(now)
        return {
            'now': now,
            'timezone': self.config.timezone,
            'cutoff_hour': self.config.cutoff_hour,
            'active_service_day': active_day,
            'active_service_day_label': self.display_date(active_day),
            'weekday': WEEKDAY_NAMES[active_day.weekday()],
            'is_today': active_day == now.date(),
        }

    @staticmethod
    def display_date(day: date) -> str:
        """Storefront label for a service day, e.g. 'Monday, Mar 2'."""
        return f"{day:%A}, {day:%b} {day.day}"
