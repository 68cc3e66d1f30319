"""
Pydantic schemas for the records handed between pipeline stages.

Schemas:
    metrics: RawEventRow, AggregatedBucket, ComparisonRecord, AlertRecord
             plus the metric declaration order and diff-log headers

Features:
    - Counter coercion (missing/blank/non-numeric -> 0)
    - Source event name normalization (Mod_NRC -> NRC)
    - Immutable records, safe to share between stages

Usage:
    from schemas.metrics import RawEventRow, AggregatedBucket, METRIC_FIELDS

Example:
    row = RawEventRow(
        brand="brand_a",
        event_type="Mod_NRC",
        date="20240601",
        hour="10",
        total_users="",
    )
    assert row.total_users == 0
"""

__all__ = [
    "RawEventRow",
    "AggregatedBucket",
    "ComparisonRecord",
    "AlertRecord",
    "METRIC_FIELDS",
    "DIFF_LOG_HEADERS",
]
