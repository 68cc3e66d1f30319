from sqlalchemy import Column, BigInteger, String, Enum, DateTime, Float, Integer, Text, Index, JSON
from datetime import datetime
import uuid
from models.base import Base, RunStatus


class MonitoringRun(Base):
    """
    Tracks metadata for each pipeline execution.

    Purpose:
    - Audit trail of all runs
    - Per-run counts for each pipeline stage
    - Anomalies recovered during the run (bad hours, bad percentages)
    """
    __tablename__ = "monitoring_runs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    run_id = Column(String(36), default=lambda: str(uuid.uuid4()), unique=True, nullable=False, index=True)

    source_name = Column(String(100), nullable=False, index=True)
    status = Column(Enum(RunStatus), default=RunStatus.RUNNING, nullable=False, index=True)

    # Timestamps
    started_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Float, nullable=True)

    # Statistics
    rows_extracted = Column(Integer, default=0)
    buckets_built = Column(Integer, default=0)
    comparisons_emitted = Column(Integer, default=0)
    alerts_flagged = Column(Integer, default=0)

    # Error tracking
    error_message = Column(Text, nullable=True)
    anomalies = Column(JSON, nullable=True)

    __table_args__ = (
        Index("idx_monitoring_run_status", "status", "started_at"),
    )
