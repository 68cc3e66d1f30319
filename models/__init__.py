"""
SQLAlchemy ORM models for database tables.

This package defines the storage layout of the pipeline's output tables:

Models:
    base: Base declarative class and shared enums (EventType, RunStatus)
    metrics: Aggregated table, diff log and alert table
    monitoring_run: Pipeline execution tracking and metrics

Database Schema:
    All models inherit from the Base declarative class and use portable
    column types, so the same tables work on PostgreSQL and SQLite.

Usage:
    from models.metrics import HourlyMetric, MetricComparison, MetricAlert
    from models.monitoring_run import MonitoringRun
    from models.base import EventType, RunStatus

Lifecycle:
    hourly_metrics, metric_comparisons and metric_alerts are replaced as a
    whole on every run; monitoring_runs accumulates one row per run.
"""

__all__ = [
    "Base",
    "EventType",
    "RunStatus",
    "HourlyMetric",
    "MetricComparison",
    "MetricAlert",
    "MonitoringRun",
]
