"""
Server clock.

All timestamps and the "today" boundary come from here, never from the
caller. Timestamps are strictly increasing within the process so that
ordering by created_at is total even when two requests land in the same
microsecond.
"""
import threading
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from leave_service.core.config import settings


def _system_now() -> datetime:
    return datetime.now(timezone.utc)


class ServerClock:
    def __init__(self, tz_name: str = "UTC", source: Optional[Callable[[], datetime]] = None):
        self.tz = ZoneInfo(tz_name)
        self._source = source or _system_now
        self._lock = threading.Lock()
        self._last: Optional[datetime] = None

    def now(self) -> datetime:
        """Timezone-aware UTC timestamp, strictly greater than the previous one."""
        with self._lock:
            current = self._source().astimezone(timezone.utc)
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
            return current

    def today(self) -> date:
        """Current calendar day at the server's day boundary."""
        return self._source().astimezone(self.tz).date()


server_clock = ServerClock(settings.server_timezone)
