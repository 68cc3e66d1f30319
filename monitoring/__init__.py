"""
Day-over-day monitoring pipeline for hourly brand analytics.

This package contains every stage of the monitoring run:

Modules:
    base: Abstract raw data source (event filtering, incomplete-hour cutoff)
    runner: Orchestrator that runs the stages and publishes the tables
    notifiers: Boundary for handing flagged alerts to a delivery channel

Subpackages:
    extractors: Raw data sources (exported CSV reports)
    transformers: Aggregator, comparator and alert classifier
    loaders: Table store with replace-on-write semantics

Architecture:
    The pipeline is strictly linear:

    1. Aggregate - raw rows -> one bucket per (brand, date, hour)
    2. Compare - each date vs. the previous date, hour by hour, per metric
    3. Classify - keep the comparisons whose swing clears the thresholds

    Every stage is a pure function of the previous stage's table; only
    the runner talks to the database.

Usage:
    from monitoring.extractors.csv_extractor import CSVExtractor
    from monitoring.runner import MonitoringRunner

Example:
    source = CSVExtractor(source_name="hourly_export", file_path="hourly.csv")

    runner = MonitoringRunner(session)
    result = await runner.run(source)

    print(f"Flagged {result['alerts_flagged']} alerts")
"""

__all__ = [
    "DataSource",
    "MonitoringRunner",
    "CSVExtractor",
    "HourlyAggregator",
    "MetricComparator",
    "AlertClassifier",
    "MetricsStore",
    "AlertNotifier",
]
