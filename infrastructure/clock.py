"""Hotel-local clock"""
import logging
from datetime import date, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from application.interfaces import DateTimeProvider
from infrastructure.config import Settings

logger = logging.getLogger(__name__)


def resolve_hotel_timezone(primary: str, fallback: str) -> tzinfo:
    """Primary zone, then fallback zone, then UTC when tzdata is missing"""
    for name in (primary, fallback):
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Time zone %r not available", name)
    return timezone.utc


class HotelDateTimeProvider(DateTimeProvider):
    """Reads wall-clock time in the hotel's configured time zone"""

    def __init__(self, settings: Settings):
        self._zone = resolve_hotel_timezone(settings.HOTEL_TIMEZONE, settings.HOTEL_FALLBACK_TIMEZONE)
        self._check_out_time = time.fromisoformat(settings.HOTEL_CHECK_OUT_TIME)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(self._zone)

    def today(self) -> date:
        return self.now().date()

    def is_late_check_out(self, check_out_date: date) -> bool:
        """Past the check-out hour on (or after) the check-out date"""
        now = self.now()
        if now.date() < check_out_date:
            return False
        return now.time() > self._check_out_time
