import logging
from datetime import date, datetime
from typing import Optional
import pytz

from walletbot.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

BOT_TZ = pytz.timezone(settings.BOT_TIMEZONE)

class TimezoneHelper:
    """
    Helper for ISO dates (2026-01-31) in the bot's time zone.
    Single responsibility: decide what "today" and "this month" mean.
    """

    @staticmethod
    def get_local_now() -> datetime:
        """Current date and time in the bot's time zone."""
        return datetime.now(BOT_TZ)

    @staticmethod
    def get_local_today() -> date:
        return TimezoneHelper.get_local_now().date()

    @staticmethod
    def today_iso() -> str:
        """Today's date as YYYY-MM-DD."""
        return TimezoneHelper.get_local_today().isoformat()

    @staticmethod
    def current_month_key(today: Optional[date] = None) -> str:
        """Current month as YYYY-MM (the key used by limits and plans)."""
        today = today or TimezoneHelper.get_local_today()
        return f"{today.year}-{today.month:02d}"

    @staticmethod
    def parse_iso_date(value: str) -> Optional[date]:
        """
        Parses the date part of an ISO string.

        Args:
            value: "2026-01-31" or "2026-01-31T10:00:00Z"

        Returns:
            date or None if the value is not a valid date
        """
        if not value or not isinstance(value, str):
            return None
        try:
            return datetime.strptime(value[:10], "%Y-%m-%d").date()
        except ValueError:
            logger.debug(f"[TZ] Not an ISO date: '{value}'")
            return None

    @staticmethod
    def is_future(iso_date: str, today: Optional[date] = None) -> bool:
        """
        True when the date is strictly after today.

        Today's transactions are applied immediately, so only later dates count
        as future.
        """
        parsed = TimezoneHelper.parse_iso_date(iso_date)
        if parsed is None:
            return False
        today = today or TimezoneHelper.get_local_today()
        return parsed > today

    @staticmethod
    def format_date_for_chat(iso_date: str) -> str:
        """
        Formats an ISO date for chat messages.

        Args:
            iso_date: "2026-01-31"

        Returns:
            str: "31/01/2026"
        """
        parsed = TimezoneHelper.parse_iso_date(iso_date)
        if parsed is None:
            return iso_date  # Fallback: keep the original
        return parsed.strftime('%d/%m/%Y')
