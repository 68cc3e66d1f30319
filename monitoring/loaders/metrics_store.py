"""
Table store for the aggregated table, the diff log and the alert table
"""

from typing import Any, Dict, List, Sequence, Type
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from core.exceptions import DatabaseError, StoreUnavailableError
from models.metrics import HourlyMetric, MetricAlert, MetricComparison
from schemas.metrics import METRIC_FIELDS, AggregatedBucket, AlertRecord, ComparisonRecord
import logging

logger = logging.getLogger(__name__)

# Driver connection failures can surface unwrapped as OSError
STORE_ERRORS = (SQLAlchemyError, OSError)


class MetricsStore:
    """
    Replace-on-write access to the pipeline's output tables.

    Each ``replace_*`` call deletes the table's rows and inserts the new
    ones inside the session's current transaction. Nothing is committed
    here: the caller commits once all three tables are written, so a run
    either replaces every table or none of them.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def replace_buckets(self, buckets: Sequence[AggregatedBucket]) -> int:
        """Overwrite the aggregated table"""
        rows = [bucket.dict() for bucket in buckets]
        return await self._replace(HourlyMetric, rows)

    async def read_buckets(self) -> List[AggregatedBucket]:
        """Aggregated table in insertion order"""
        try:
            result = await self.db.execute(select(HourlyMetric).order_by(HourlyMetric.id))
            rows = result.scalars().all()
        except STORE_ERRORS as e:
            raise to_store_error(e, "SELECT", HourlyMetric.__tablename__)

        return [
            AggregatedBucket(
                brand=row.brand,
                date=row.date,
                hour=row.hour,
                date_hour=row.date_hour or "",
                **{metric: getattr(row, metric) for metric in METRIC_FIELDS}
            )
            for row in rows
        ]

    async def replace_comparisons(self, comparisons: Sequence[ComparisonRecord]) -> int:
        """Overwrite the diff log"""
        rows = [record.dict() for record in comparisons]
        return await self._replace(MetricComparison, rows)

    async def replace_alerts(self, alerts: Sequence[AlertRecord]) -> int:
        """Overwrite the alert table"""
        rows = [record.dict() for record in alerts]
        return await self._replace(MetricAlert, rows)

    async def _replace(self, model: Type, rows: List[Dict[str, Any]]) -> int:
        table_name = model.__tablename__

        try:
            await self.db.execute(delete(model))
        except STORE_ERRORS as e:
            raise to_store_error(e, "DELETE", table_name)

        if rows:
            try:
                await self.db.execute(insert(model), rows)
            except STORE_ERRORS as e:
                raise to_store_error(e, "INSERT", table_name, rows=len(rows))

        logger.info(f"Staged {len(rows)} rows into {table_name}")
        return len(rows)


def to_store_error(error: Exception, operation: str, table_name: str, **context) -> DatabaseError:
    context = {"operation": operation, "table_name": table_name, **context}

    if isinstance(error, (OperationalError, OSError)) or (
        isinstance(error, DBAPIError) and error.connection_invalidated
    ):
        return StoreUnavailableError(
            f"Table store unreachable during {operation}",
            context=context,
            original_exception=error
        )
    return DatabaseError(
        f"Table store {operation} failed",
        context=context,
        original_exception=error
    )
