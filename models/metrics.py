from sqlalchemy import Column, BigInteger, Integer, String, Index
from models.base import Base


class HourlyMetric(Base):
    """
    Aggregated table: one row per (brand, date, hour) bucket.

    Fully replaced on every run; the comparator reads it back in
    insertion order.
    """
    __tablename__ = "hourly_metrics"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    brand = Column(String(100), nullable=False)
    date = Column(String(10), nullable=False)
    hour = Column(String(8), nullable=False)
    date_hour = Column(String(16), nullable=True)

    NRC_totalUsers = Column(Integer, nullable=False, default=0)
    NRC_sessions = Column(Integer, nullable=False, default=0)
    NRC_eventCount = Column(Integer, nullable=False, default=0)
    NDC_totalUsers = Column(Integer, nullable=False, default=0)
    NDC_sessions = Column(Integer, nullable=False, default=0)
    NDC_eventCount = Column(Integer, nullable=False, default=0)
    RDC_totalUsers = Column(Integer, nullable=False, default=0)
    RDC_sessions = Column(Integer, nullable=False, default=0)
    RDC_eventCount = Column(Integer, nullable=False, default=0)
    Casino_Bet_Placed_totalUsers = Column(Integer, nullable=False, default=0)
    Casino_Bet_Placed_sessions = Column(Integer, nullable=False, default=0)
    Casino_Bet_Placed_eventCount = Column(Integer, nullable=False, default=0)
    Sportsbook_Bet_Placed_totalUsers = Column(Integer, nullable=False, default=0)
    Sportsbook_Bet_Placed_sessions = Column(Integer, nullable=False, default=0)
    Sportsbook_Bet_Placed_eventCount = Column(Integer, nullable=False, default=0)
    page_view_totalUsers = Column(Integer, nullable=False, default=0)
    page_view_sessions = Column(Integer, nullable=False, default=0)
    page_view_eventCount = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_hourly_metric_bucket", "brand", "date", "hour"),
    )


class ComparisonColumns:
    """Diff-log layout shared by the comparison and alert tables"""

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    brand = Column(String(100), nullable=False, index=True)
    date1 = Column(String(10), nullable=False)
    date2 = Column(String(10), nullable=False)
    hour = Column(Integer, nullable=False)
    metric = Column(String(64), nullable=False)
    value1 = Column(Integer, nullable=False, default=0)
    value2 = Column(Integer, nullable=False, default=0)
    percent_diff = Column(String(32), nullable=False)


class MetricComparison(ComparisonColumns, Base):
    """
    Diff log: one row per (brand, date1, date2, hour, metric).

    Columns follow the diff-log layout
    [Brand, Date1 (Latest), Date2 (Previous), Hour, Metric,
     Date1 Value, Date2 Value, Percentage Difference].
    """
    __tablename__ = "metric_comparisons"


class MetricAlert(ComparisonColumns, Base):
    """Alert table: the flagged subset of the diff log, same layout"""
    __tablename__ = "metric_alerts"
