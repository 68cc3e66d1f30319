"""
Compare each brand's hourly buckets against the previous date's same hour
"""

from typing import Dict, Iterable, List
from core.exceptions import OutOfRangeHourError
from schemas.metrics import METRIC_FIELDS, AggregatedBucket, ComparisonRecord, parse_hour
import logging

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


def calculate_percentage_difference(value1: int, value2: int) -> str:
    """
    Percentage change of value1 (later date) against value2 (earlier date).

    Zero baselines saturate to the "+100%" / "-100%" sentinels; two zeros
    are "0%". Computed values are signed only when negative.
    """
    if value1 == 0 and value2 == 0:
        return "0%"
    if value2 == 0:
        return "+100%"
    if value1 == 0:
        return "-100%"
    return f"{((value1 - value2) / value2) * 100:.2f}%"


class MetricComparator:
    """
    Day-over-day comparison of aggregated buckets.

    For every brand the distinct dates are sorted ascending and each date
    is paired with its predecessor, newest pair first. Within a pair the
    hours run 0..23 and the metrics follow METRIC_FIELDS. An hour present
    on only one side of a pair is skipped.

    Buckets whose hour is not in 0..23 are kept out of the comparison and
    recorded in ``anomalies``.
    """

    def __init__(self):
        self.anomalies: List[OutOfRangeHourError] = []

    def compare(self, buckets: Iterable[AggregatedBucket]) -> List[ComparisonRecord]:
        self.anomalies = []
        grouped = self._group(buckets)

        results: List[ComparisonRecord] = []
        for brand, by_date in grouped.items():
            dates = sorted(by_date)
            for i in range(len(dates) - 1, 0, -1):
                date1, date2 = dates[i], dates[i - 1]
                for hour in range(HOURS_PER_DAY):
                    bucket1 = by_date[date1].get(hour)
                    bucket2 = by_date[date2].get(hour)
                    if bucket1 is None or bucket2 is None:
                        continue

                    for metric in METRIC_FIELDS:
                        value1 = bucket1.metric(metric)
                        value2 = bucket2.metric(metric)
                        results.append(
                            ComparisonRecord(
                                brand=brand,
                                date1=date1,
                                date2=date2,
                                hour=hour,
                                metric=metric,
                                value1=value1,
                                value2=value2,
                                percent_diff=calculate_percentage_difference(value1, value2),
                            )
                        )

        logger.info(
            f"Compared {len(grouped)} brands: {len(results)} comparison records, "
            f"{len(self.anomalies)} out-of-range hours"
        )
        return results

    def _group(
        self, buckets: Iterable[AggregatedBucket]
    ) -> Dict[str, Dict[str, Dict[int, AggregatedBucket]]]:
        """brand -> date -> hour -> bucket, brands in first-seen order"""
        grouped: Dict[str, Dict[str, Dict[int, AggregatedBucket]]] = {}

        for bucket in buckets:
            hour = parse_hour(bucket.hour)
            if hour is None or not 0 <= hour < HOURS_PER_DAY:
                self._report_bad_hour(bucket)
                continue

            by_hour = grouped.setdefault(bucket.brand, {}).setdefault(bucket.date, {})
            if hour in by_hour:
                logger.warning(
                    f"Duplicate bucket for {bucket.brand} {bucket.date} hour {hour} "
                    f"(dateHour {bucket.date_hour}); keeping the later one"
                )
            by_hour[hour] = bucket

        return grouped

    def _report_bad_hour(self, bucket: AggregatedBucket):
        error = OutOfRangeHourError(
            "Bucket hour is outside 0..23",
            context={
                "brand": bucket.brand,
                "date": bucket.date,
                "hour": bucket.hour,
                "date_hour": bucket.date_hour,
            }
        )
        self.anomalies.append(error)
        logger.warning(
            f"Skipping bucket with invalid hour {bucket.hour!r} "
            f"for {bucket.brand} on {bucket.date}",
            extra={"error_context": error.to_dict()}
        )


def compare(buckets: Iterable[AggregatedBucket]) -> List[ComparisonRecord]:
    """Compare hourly buckets day over day"""
    return MetricComparator().compare(buckets)
