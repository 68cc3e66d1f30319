"""
Aggregate raw hourly event rows into per-(brand, date, hour) buckets
"""

from collections import Counter
from typing import Dict, Iterable, List, NamedTuple
from schemas.metrics import AggregatedBucket, RawEventRow, metric_fields_for
import logging

logger = logging.getLogger(__name__)


class BucketKey(NamedTuple):
    brand: str
    date: str
    hour: str
    date_hour: str


class HourlyAggregator:
    """
    Fold raw event rows into one AggregatedBucket per bucket key.

    Every bucket starts with all 18 counters at 0; each row adds its
    totalUsers / sessions / eventCount into the counters of its event.
    Buckets come out in first-seen key order.
    """

    def aggregate(self, rows: Iterable[RawEventRow]) -> List[AggregatedBucket]:
        grouped: Dict[BucketKey, Counter] = {}
        row_count = 0

        for row in rows:
            key = BucketKey(row.brand, row.date, row.hour, row.date_hour)
            counters = grouped.setdefault(key, Counter())

            users_field, sessions_field, events_field = metric_fields_for(row.event_type)
            counters[users_field] += row.total_users
            counters[sessions_field] += row.sessions
            counters[events_field] += row.event_count
            row_count += 1

        buckets = [
            AggregatedBucket(
                brand=key.brand,
                date=key.date,
                hour=key.hour,
                date_hour=key.date_hour,
                **counters
            )
            for key, counters in grouped.items()
        ]

        logger.info(f"Aggregated {row_count} raw rows into {len(buckets)} buckets")
        return buckets


def aggregate(rows: Iterable[RawEventRow]) -> List[AggregatedBucket]:
    """Aggregate raw rows into hourly buckets"""
    return HourlyAggregator().aggregate(rows)
