"""
Core utilities and configuration for the brand metrics monitor.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Database engine and session factory
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import DatabaseError, OutOfRangeHourError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Get database session
    async with async_session_maker() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "async_session_maker",
    "setup_logging",
    # Exceptions
    "PipelineException",
    "ExtractionError",
    "CSVExtractionError",
    "DataFormatError",
    "TransformationError",
    "OutOfRangeHourError",
    "UnparsablePercentageError",
    "LoadError",
    "DatabaseError",
    "StoreUnavailableError",
    "RetryableError",
    "NonRetryableError",
]
