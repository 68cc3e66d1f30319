"""
Notification boundary for flagged alerts
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Sequence
from schemas.metrics import AlertRecord
import logging

logger = logging.getLogger(__name__)


class AlertNotifier(ABC):
    """
    Receives the alert table of a successful run.

    Only called when the run flagged at least one alert. Delivery
    (email, chat, dashboards) belongs to the implementation.
    """

    @abstractmethod
    async def notify(self, alerts: Sequence[AlertRecord], summary: Dict[str, Any]) -> None:
        pass


class LoggingAlertNotifier(AlertNotifier):
    """Writes a run summary and one line per alert to the log"""

    async def notify(self, alerts: Sequence[AlertRecord], summary: Dict[str, Any]) -> None:
        decreases = sum(1 for alert in alerts if alert.direction == "decrease")
        logger.warning(
            f"{len(alerts)} metric alerts for run {summary.get('run_id')} "
            f"({decreases} decreases, {len(alerts) - decreases} increases)"
        )
        for alert in alerts:
            logger.warning(
                f"[{alert.direction}] {alert.brand} {alert.metric} hour {alert.hour}: "
                f"{alert.value1} on {alert.date1} vs {alert.value2} on {alert.date2} "
                f"({alert.percent_diff})"
            )
