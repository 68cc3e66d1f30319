"""
Abstract base class for raw hourly event sources
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional
from datetime import datetime
from zoneinfo import ZoneInfo
from core.config import settings
from schemas.metrics import RawEventRow, parse_event_type, parse_hour
import logging

logger = logging.getLogger(__name__)


class DataSource(ABC):
    """
    Abstract base class for all raw data sources.

    Responsibilities:
    - Fetch the raw hourly snapshot (subclasses)
    - Keep only the six tracked events
    - Drop hours that are not complete yet
    - Build validated RawEventRow records
    """

    def __init__(
        self,
        source_name: str,
        timezone: Optional[str] = None,
        completed_hour_lag: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.source_name = source_name
        self.timezone = ZoneInfo(timezone or settings.REPORT_TIMEZONE)
        self.completed_hour_lag = (
            settings.COMPLETED_HOUR_LAG if completed_hour_lag is None else completed_hour_lag
        )
        self.clock = clock or (lambda: datetime.now(self.timezone))

    @abstractmethod
    async def fetch_data(self) -> List[Dict[str, Any]]:
        """
        Fetch raw rows from the source.

        Returns:
            List of dicts keyed by brand, country, event_type, date, hour,
            date_hour, total_users, sessions, event_count
        """
        pass

    def latest_complete_hour(self) -> Optional[int]:
        """Last hour considered complete, or None when the filter is disabled"""
        if self.completed_hour_lag < 0:
            return None
        return self.clock().astimezone(self.timezone).hour - self.completed_hour_lag

    async def extract(self) -> List[RawEventRow]:
        """Fetch and normalize the raw snapshot"""
        records = await self.fetch_data()
        max_hour = self.latest_complete_hour()

        rows = []
        skipped_events = 0
        skipped_hours = 0

        for record in records:
            if parse_event_type(record.get("event_type")) is None:
                skipped_events += 1
                continue

            hour = parse_hour(record.get("hour"))
            # Unparsable hours pass through so the comparator can report them
            if max_hour is not None and hour is not None and hour > max_hour:
                skipped_hours += 1
                continue

            rows.append(RawEventRow(**record))

        logger.info(
            f"Extracted {len(rows)} rows from {self.source_name} "
            f"(skipped {skipped_events} untracked events, {skipped_hours} incomplete hours)"
        )
        return rows
