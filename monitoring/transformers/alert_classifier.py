"""
Flag comparison records whose swing is large enough to alert on
"""

import math
from typing import Iterable, List, Optional
from core.config import settings
from core.exceptions import UnparsablePercentageError
from schemas.metrics import AlertRecord, ComparisonRecord
import logging

logger = logging.getLogger(__name__)


def parse_percentage(percent_diff: str) -> float:
    """
    Hundred-scaled ratio of a percentage string: "-300%" -> -3.0, "+500%" -> 5.0.

    Raises:
        ValueError: if the string is not a finite number followed by an optional "%"
    """
    text = str(percent_diff).strip()
    if text.endswith("%"):
        text = text[:-1]
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"Non-finite percentage: {percent_diff!r}")
    return number / 100


class AlertClassifier:
    """
    Threshold classifier over comparison records.

    A record is flagged when any rule holds:
    - drop to zero: value1 == 0, value2 >= noise floor, and a full drop
    - large drop: ratio <= drop threshold, both values >= noise floor
    - large spike: ratio >= spike threshold, both values >= noise floor

    Records whose percentage does not parse are not flagged and are
    collected in ``anomalies``.
    """

    def __init__(
        self,
        drop_threshold: Optional[float] = None,
        spike_threshold: Optional[float] = None,
        noise_floor: Optional[int] = None
    ):
        self.drop_threshold = settings.ALERT_DROP_THRESHOLD if drop_threshold is None else drop_threshold
        self.spike_threshold = settings.ALERT_SPIKE_THRESHOLD if spike_threshold is None else spike_threshold
        self.noise_floor = settings.ALERT_NOISE_FLOOR if noise_floor is None else noise_floor
        self.anomalies: List[UnparsablePercentageError] = []

    def classify(self, comparisons: Iterable[ComparisonRecord]) -> List[AlertRecord]:
        self.anomalies = []
        checked = 0

        alerts = []
        for record in comparisons:
            checked += 1
            if self.is_alert(record):
                alerts.append(AlertRecord.from_comparison(record))

        logger.info(f"Classified {checked} comparisons: {len(alerts)} alerts")
        return alerts

    def is_alert(self, record: ComparisonRecord) -> bool:
        num_diff = self._ratio(record)
        floor = self.noise_floor

        # Full drop from a meaningful base; the sentinel "-100%" is -1
        if num_diff <= -1 and record.value1 == 0 and record.value2 >= floor:
            return True
        if num_diff <= self.drop_threshold and record.value1 >= floor and record.value2 >= floor:
            return True
        if num_diff >= self.spike_threshold and record.value1 >= floor and record.value2 >= floor:
            return True
        return False

    def _ratio(self, record: ComparisonRecord) -> float:
        try:
            return parse_percentage(record.percent_diff)
        except (ValueError, TypeError) as e:
            error = UnparsablePercentageError(
                "Percentage difference is not numeric",
                context={
                    "brand": record.brand,
                    "date1": record.date1,
                    "date2": record.date2,
                    "hour": record.hour,
                    "metric": record.metric,
                    "percent_diff": record.percent_diff,
                },
                original_exception=e
            )
            self.anomalies.append(error)
            logger.warning(
                f"Unparsable percentage {record.percent_diff!r} for {record.brand} "
                f"{record.metric} hour {record.hour}; treating as no change",
                extra={"error_context": error.to_dict()}
            )
            return 0.0


def classify(comparisons: Iterable[ComparisonRecord]) -> List[AlertRecord]:
    """Filter comparisons down to alert-worthy swings"""
    return AlertClassifier().classify(comparisons)
