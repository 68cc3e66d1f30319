"""
Custom exceptions for the monitoring pipeline with structured error context.

This module provides the exception hierarchy used throughout the
aggregation → comparison → alert pipeline. Each exception carries
context information for debugging and for the run's anomaly log.

Exception Hierarchy:
    PipelineException (base)
    ├── ExtractionError
    │   ├── CSVExtractionError
    │   └── DataFormatError
    ├── TransformationError
    │   ├── OutOfRangeHourError
    │   └── UnparsablePercentageError
    ├── LoadError
    │   └── DatabaseError
    │       └── StoreUnavailableError
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any
from datetime import datetime


class PipelineException(Exception):
    """
    Base exception for all monitoring pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (brand, date, hour, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(PipelineException):
    """
    Mixin for errors where re-running the whole pipeline may succeed.

    Every run rebuilds its tables from the raw snapshot, so retrying
    after a transient store outage is safe.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0
    ):
        super().__init__(message, context, original_exception)
        self.max_retries = max_retries
        self.retry_delay = retry_delay


class NonRetryableError(PipelineException):
    """
    Mixin for errors that will fail again on retry.

    Use this for permanent errors like a raw export with the wrong layout.
    """
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(PipelineException):
    """Base exception for raw data source failures."""
    pass


class CSVExtractionError(ExtractionError):
    """
    Exception raised when the exported hourly report cannot be read.

    Context should include:
        - file_path: Path to the CSV file
    """
    pass


class DataFormatError(NonRetryableError, ExtractionError):
    """
    Raw rows do not have the expected column layout.

    Context should include:
        - missing_columns: Required columns not present in the source
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(PipelineException):
    """Base exception for per-row anomalies found while transforming."""
    pass


class OutOfRangeHourError(TransformationError):
    """
    A bucket's hour is not an integer in 0..23.

    Signals corrupted raw input. The bucket is excluded from comparison
    and the anomaly is reported with the run.

    Context should include:
        - brand, date, hour, date_hour
    """
    pass


class UnparsablePercentageError(TransformationError):
    """
    A comparison's percentage difference could not be parsed back to a number.

    The record is treated as non-alerting.

    Context should include:
        - brand, date1, date2, hour, metric, percent_diff
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(PipelineException):
    """Base exception for table store failures."""
    pass


class DatabaseError(LoadError):
    """
    Exception raised when a table store operation fails.

    Context should include:
        - operation: Type of database operation (DELETE, INSERT, SELECT, COMMIT)
        - table_name: Name of the table
    """
    pass


class StoreUnavailableError(RetryableError, DatabaseError):
    """The table store could not be reached."""
    pass
