"""
CSV extractor for exported hourly analytics reports
"""

import pandas as pd
from typing import List, Dict, Any
from pathlib import Path
from core.exceptions import CSVExtractionError, DataFormatError
from monitoring.base import DataSource
import logging

logger = logging.getLogger(__name__)

# Export header (lowercased) -> RawEventRow field
COLUMN_ALIASES = {
    "streamname": "brand",
    "brand": "brand",
    "country": "country",
    "eventname": "event_type",
    "event_type": "event_type",
    "date": "date",
    "hour": "hour",
    "datehour": "date_hour",
    "date_hour": "date_hour",
    "totalusers": "total_users",
    "total_users": "total_users",
    "sessions": "sessions",
    "eventcount": "event_count",
    "event_count": "event_count",
}

REQUIRED_COLUMNS = ["brand", "event_type", "date", "hour"]


class CSVExtractor(DataSource):
    """
    Read an hourly report export.

    Expects the analytics report columns
    streamName, country, eventName, date, hour, dateHour,
    totalUsers, sessions, eventCount (snake_case names are accepted too).
    Every cell is read as text so zero-padded hours and dates survive.
    """

    def __init__(self, source_name: str, file_path: str, **kwargs):
        super().__init__(source_name=source_name, **kwargs)
        self.file_path = Path(file_path)

    async def fetch_data(self) -> List[Dict[str, Any]]:
        if not self.file_path.exists():
            raise CSVExtractionError(
                "Hourly report file not found",
                context={"file_path": str(self.file_path)}
            )

        logger.info(f"Reading CSV from {self.file_path}")

        try:
            df = pd.read_csv(self.file_path, dtype=str, keep_default_na=False)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise CSVExtractionError(
                "Hourly report could not be parsed",
                context={"file_path": str(self.file_path)},
                original_exception=e
            )

        # Normalize column names (strip whitespace, lowercase) then map aliases
        df.columns = df.columns.str.strip().str.lower().str.replace(' ', '_')
        df = df.rename(columns=COLUMN_ALIASES)

        missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
        if missing:
            raise DataFormatError(
                "Hourly report is missing required columns",
                context={"file_path": str(self.file_path), "missing_columns": missing}
            )

        known = [column for column in df.columns if column in set(COLUMN_ALIASES.values())]
        records = df[known].to_dict(orient="records")

        logger.info(f"Read {len(records)} records from CSV")
        return records
