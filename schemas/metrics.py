"""
Pydantic schemas for the records flowing through the monitoring pipeline
"""

import math
from typing import Any, List, Optional, Tuple
from pydantic import BaseModel, validator
from models.base import EventType

SOURCE_EVENT_PREFIX = "Mod_"

COUNTER_SUFFIXES: Tuple[str, ...] = ("totalUsers", "sessions", "eventCount")

# Declaration order of the 18 bucket counters; drives comparator emission order
METRIC_FIELDS: Tuple[str, ...] = tuple(
    f"{event.value}_{suffix}" for event in EventType for suffix in COUNTER_SUFFIXES
)

DIFF_LOG_HEADERS: List[str] = [
    "Brand",
    "Date1 (Latest)",
    "Date2 (Previous)",
    "Hour",
    "Metric",
    "Date1 Value",
    "Date2 Value",
    "Percentage Difference",
]


def coerce_count(value: Any) -> int:
    """
    Parse a counter value, falling back to 0.

    Missing, blank, NaN, negative and non-numeric inputs all become 0.
    Fractional strings are truncated ("12.7" -> 12).
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        number = float(value)
    except (ValueError, TypeError):
        return 0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0
    return int(number)


def parse_hour(value: Any) -> Optional[int]:
    """Integer hour, or None when the value is not a whole number"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except (ValueError, TypeError):
        return None
    if math.isnan(number) or math.isinf(number) or not number.is_integer():
        return None
    return int(number)


def parse_event_type(value: Any) -> Optional[EventType]:
    """Map a source event name (with or without the Mod_ prefix) to an EventType"""
    if isinstance(value, EventType):
        return value
    if value is None:
        return None
    name = str(value).strip()
    if name.startswith(SOURCE_EVENT_PREFIX):
        name = name[len(SOURCE_EVENT_PREFIX):]
    try:
        return EventType(name)
    except ValueError:
        return None


def metric_fields_for(event_type: EventType) -> Tuple[str, str, str]:
    """Bucket counter names (totalUsers, sessions, eventCount) for one event"""
    return tuple(f"{event_type.value}_{suffix}" for suffix in COUNTER_SUFFIXES)


class RawEventRow(BaseModel):
    """
    One observed (brand, event, date, hour) measurement from the raw source.

    Counters never carry None or NaN: anything unparsable becomes 0.
    """

    brand: str
    country: str = ""
    event_type: EventType
    date: str
    hour: str
    date_hour: str = ""
    total_users: int = 0
    sessions: int = 0
    event_count: int = 0

    @validator("total_users", "sessions", "event_count", pre=True)
    def coerce_counters(cls, v):
        return coerce_count(v)

    @validator("event_type", pre=True)
    def normalize_event_type(cls, v):
        event_type = parse_event_type(v)
        if event_type is None:
            raise ValueError(f"Unrecognized event type: {v!r}")
        return event_type

    @validator("hour", pre=True)
    def normalize_hour(cls, v):
        """Zero-pad whole-number hours ("5", 5 -> "05"); keep anything else as given"""
        if v is None:
            return ""
        hour = parse_hour(v)
        if hour is not None:
            return f"{hour:02d}"
        return str(v).strip()

    @validator("brand", "country", "date", "date_hour", pre=True)
    def clean_text(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @validator("date_hour")
    def pad_date_hour(cls, v, values):
        """Rebuild a date + unpadded hour composite ("202406015") with the padded hour"""
        date, hour = values.get("date"), values.get("hour")
        if not v or not date or not hour or not v.startswith(date):
            return v
        suffix = parse_hour(v[len(date):])
        if suffix is not None and suffix == parse_hour(hour):
            return f"{date}{hour}"
        return v

    class Config:
        frozen = True


class AggregatedBucket(BaseModel):
    """Summed counters for one (brand, date, hour) across all six events"""

    brand: str
    date: str
    hour: str
    date_hour: str = ""

    NRC_totalUsers: int = 0
    NRC_sessions: int = 0
    NRC_eventCount: int = 0
    NDC_totalUsers: int = 0
    NDC_sessions: int = 0
    NDC_eventCount: int = 0
    RDC_totalUsers: int = 0
    RDC_sessions: int = 0
    RDC_eventCount: int = 0
    Casino_Bet_Placed_totalUsers: int = 0
    Casino_Bet_Placed_sessions: int = 0
    Casino_Bet_Placed_eventCount: int = 0
    Sportsbook_Bet_Placed_totalUsers: int = 0
    Sportsbook_Bet_Placed_sessions: int = 0
    Sportsbook_Bet_Placed_eventCount: int = 0
    page_view_totalUsers: int = 0
    page_view_sessions: int = 0
    page_view_eventCount: int = 0

    @validator(*METRIC_FIELDS, pre=True)
    def coerce_metrics(cls, v):
        return coerce_count(v)

    def metric(self, name: str) -> int:
        """Counter value by metric name"""
        if name not in METRIC_FIELDS:
            raise KeyError(name)
        return getattr(self, name)

    class Config:
        frozen = True


class ComparisonRecord(BaseModel):
    """One metric of one brand/hour compared between two adjacent dates"""

    brand: str
    date1: str
    date2: str
    hour: int
    metric: str
    value1: int
    value2: int
    percent_diff: str

    def to_row(self) -> List[Any]:
        """Values in DIFF_LOG_HEADERS order"""
        return [
            self.brand,
            self.date1,
            self.date2,
            self.hour,
            self.metric,
            self.value1,
            self.value2,
            self.percent_diff,
        ]

    class Config:
        frozen = True


class AlertRecord(ComparisonRecord):
    """A comparison that passed the alert classifier"""

    @property
    def direction(self) -> str:
        """'decrease' for negative swings, 'increase' otherwise (used for highlighting)"""
        return "decrease" if self.percent_diff.strip().startswith("-") else "increase"

    @classmethod
    def from_comparison(cls, record: ComparisonRecord) -> "AlertRecord":
        return cls(**record.dict())
