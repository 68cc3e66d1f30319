# ============================================================================
# File: monitoring/runner.py
# Description: Pipeline orchestrator with run tracking and atomic table replace
# ============================================================================
"""
Monitoring Runner - Orchestrates Aggregate, Compare, Classify pipeline.

This module provides:
- One complete pipeline run per call, serialized across the process
- All three output tables replaced in a single transaction
- Per-row anomalies collected into the run result instead of failing it
- Run metrics recorded in the monitoring_runs table
"""

import asyncio
import uuid
import weakref
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from monitoring.base import DataSource
from monitoring.loaders.metrics_store import STORE_ERRORS, MetricsStore, to_store_error
from monitoring.notifiers import AlertNotifier
from monitoring.transformers.aggregator import HourlyAggregator
from monitoring.transformers.alert_classifier import AlertClassifier
from monitoring.transformers.comparator import MetricComparator
from models.base import RunStatus
from models.monitoring_run import MonitoringRun
from core.exceptions import (
    PipelineException,
    ExtractionError,
    LoadError,
)

logger = logging.getLogger(__name__)


class MonitoringRunner:
    """
    Pipeline Orchestrator

    Responsibilities:
    - Orchestrate Extract → Aggregate → Compare → Classify
    - Replace the aggregated, diff-log and alert tables atomically
    - Serialize runs (they overwrite shared tables)
    - Record accurate run metrics
    - Hand alerts to the notifier when there are any
    """

    # One lock per event loop; a Lock waits only on the loop it first waited on
    _run_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()

    def __init__(
        self,
        db_session: AsyncSession,
        notifier: Optional[AlertNotifier] = None,
        classifier: Optional[AlertClassifier] = None
    ):
        self.db = db_session
        self.notifier = notifier
        self.classifier = classifier or AlertClassifier()

    async def run(self, source: DataSource) -> Dict[str, Any]:
        """
        Run the full pipeline for one raw snapshot.

        Pipeline phases:
        1. Extract - Fetch and normalize raw rows
        2. Aggregate - Build hourly buckets, stage the aggregated table
        3. Compare - Read buckets back, stage the diff log
        4. Classify - Flag alerts, stage the alert table
        5. Commit - Publish all three tables and the run record
        6. Notify - Hand alerts to the notifier (only when any were flagged)

        Returns:
            Dictionary with run statistics:
            - run_id, status
            - rows_extracted, buckets_built, comparisons_emitted, alerts_flagged
            - anomalies: recovered per-row problems (bad hours, bad percentages)

        Raises:
            ExtractionError: If the raw source fails
            LoadError: If a table store operation fails
            PipelineException: For any other failure
        """
        run_lock = self._run_lock()
        if run_lock.locked():
            logger.warning("Previous monitoring run still in progress; waiting")

        async with run_lock:
            return await self._run(source)

    @classmethod
    def _run_lock(cls) -> asyncio.Lock:
        """Lock serializing runs on the current event loop"""
        loop = asyncio.get_running_loop()
        lock = cls._run_locks.get(loop)
        if lock is None:
            lock = cls._run_locks[loop] = asyncio.Lock()
        return lock

    async def _run(self, source: DataSource) -> Dict[str, Any]:
        stats = {
            "rows_extracted": 0,
            "buckets_built": 0,
            "comparisons_emitted": 0,
            "alerts_flagged": 0,
        }
        anomalies: List[Dict[str, Any]] = []

        run_id = str(uuid.uuid4())
        started_at = datetime.utcnow()
        monitoring_run = await self._start_run(source, run_id, started_at)

        try:
            # --------------------------------------------------
            # PHASE 1: EXTRACTION
            # --------------------------------------------------
            logger.info(f"Starting extraction for {source.source_name}")

            try:
                rows = await source.extract()
            except ExtractionError:
                raise
            except Exception as e:
                raise ExtractionError(
                    "Unexpected error during extraction",
                    context={"source_name": source.source_name},
                    original_exception=e
                )

            stats["rows_extracted"] = len(rows)

            # --------------------------------------------------
            # PHASE 2: AGGREGATION
            # --------------------------------------------------
            store = MetricsStore(self.db)

            buckets = HourlyAggregator().aggregate(rows)
            stats["buckets_built"] = await store.replace_buckets(buckets)

            # --------------------------------------------------
            # PHASE 3: COMPARISON
            # --------------------------------------------------
            comparator = MetricComparator()
            comparisons = comparator.compare(await store.read_buckets())
            anomalies.extend(error.to_dict() for error in comparator.anomalies)

            stats["comparisons_emitted"] = await store.replace_comparisons(comparisons)

            # --------------------------------------------------
            # PHASE 4: CLASSIFICATION
            # --------------------------------------------------
            alerts = self.classifier.classify(comparisons)
            anomalies.extend(error.to_dict() for error in self.classifier.anomalies)

            stats["alerts_flagged"] = await store.replace_alerts(alerts)

            # --------------------------------------------------
            # PHASE 5: COMMIT
            # --------------------------------------------------
            self._complete_run(monitoring_run, started_at, RunStatus.SUCCESS, stats, anomalies)

            try:
                await self.db.commit()
            except STORE_ERRORS as e:
                raise to_store_error(e, "COMMIT", "hourly_metrics, metric_comparisons, metric_alerts")

        except (ExtractionError, LoadError) as e:
            logger.error(
                f"Monitoring run failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            await self._fail_run(monitoring_run, started_at, stats, anomalies, e.message)
            raise

        except Exception as e:
            logger.exception("Unexpected error in monitoring pipeline")
            await self._fail_run(monitoring_run, started_at, stats, anomalies, str(e))

            raise PipelineException(
                "Unexpected error in monitoring pipeline",
                context={"source_name": source.source_name, **stats},
                original_exception=e
            )

        result = {
            "run_id": run_id,
            "status": RunStatus.SUCCESS.value,
            **stats,
            "anomalies": anomalies,
        }

        logger.info(
            f"Monitoring run completed: Rows: {stats['rows_extracted']}, "
            f"Buckets: {stats['buckets_built']}, Comparisons: {stats['comparisons_emitted']}, "
            f"Alerts: {stats['alerts_flagged']}, Anomalies: {len(anomalies)}"
        )

        # --------------------------------------------------
        # PHASE 6: NOTIFY
        # --------------------------------------------------
        if alerts and self.notifier is not None:
            try:
                await self.notifier.notify(alerts, result)
            except Exception as e:
                # Tables are already published; report the failure with the run
                logger.exception("Alert notification failed")
                result["notification_error"] = str(e)

        return result

    async def _start_run(self, source: DataSource, run_id: str, started_at: datetime) -> MonitoringRun:
        """Create the run record (also fails fast when the store is down)"""
        monitoring_run = MonitoringRun(
            run_id=run_id,
            source_name=source.source_name,
            status=RunStatus.RUNNING,
            started_at=started_at
        )
        self.db.add(monitoring_run)

        try:
            await self.db.commit()
        except STORE_ERRORS as e:
            await self.db.rollback()
            error = to_store_error(e, "INSERT", MonitoringRun.__tablename__)
            logger.error(
                f"Could not start monitoring run: {error.message}",
                extra={"error_context": error.to_dict()}
            )
            raise error

        return monitoring_run

    @staticmethod
    def _complete_run(
        monitoring_run: MonitoringRun,
        started_at: datetime,
        status: RunStatus,
        stats: Dict[str, int],
        anomalies: List[Dict[str, Any]],
        error_message: Optional[str] = None
    ):
        monitoring_run.status = status
        completed_at = datetime.utcnow()
        monitoring_run.completed_at = completed_at
        monitoring_run.duration_seconds = (completed_at - started_at).total_seconds()
        monitoring_run.rows_extracted = stats["rows_extracted"]
        monitoring_run.buckets_built = stats["buckets_built"]
        monitoring_run.comparisons_emitted = stats["comparisons_emitted"]
        monitoring_run.alerts_flagged = stats["alerts_flagged"]
        monitoring_run.anomalies = anomalies or None
        monitoring_run.error_message = error_message

    async def _fail_run(
        self,
        monitoring_run: MonitoringRun,
        started_at: datetime,
        stats: Dict[str, int],
        anomalies: List[Dict[str, Any]],
        error_message: str
    ):
        """Discard staged tables and mark the run FAILED"""
        try:
            await self.db.rollback()
            self._complete_run(monitoring_run, started_at, RunStatus.FAILED, stats, anomalies, error_message)
            await self.db.commit()
        except STORE_ERRORS as e:
            # The original failure is re-raised by the caller
            logger.error(f"Could not record failed run: {e}")
