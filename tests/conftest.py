"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from datetime import datetime
from typing import Any, AsyncGenerator, Dict, List
from zoneinfo import ZoneInfo
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from models.base import Base
# Import all models to ensure they are registered
import models.metrics  # noqa: F401
import models.monitoring_run  # noqa: F401
from monitoring.base import DataSource

# In-memory database shared by one engine's single connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class StaticSource(DataSource):
    """Raw source serving a fixed list of records"""

    def __init__(self, records: List[Dict[str, Any]], source_name: str = "static_test", **kwargs):
        kwargs.setdefault("completed_hour_lag", -1)
        super().__init__(source_name=source_name, **kwargs)
        self.records = records

    async def fetch_data(self) -> List[Dict[str, Any]]:
        return list(self.records)


def make_record(brand, date, hour, event_type="page_view", total_users=0, sessions=0, event_count=0, country="MT"):
    """Raw record as a data source delivers it"""
    return {
        "brand": brand,
        "country": country,
        "event_type": event_type,
        "date": date,
        "hour": hour,
        "date_hour": f"{date}{hour}",
        "total_users": total_users,
        "sessions": sessions,
        "event_count": event_count,
    }


def fixed_clock(hour: int):
    """Clock pinned to the given hour of 2024-06-02 in the report timezone"""
    return lambda: datetime(2024, 6, 2, hour, 30, tzinfo=ZoneInfo("Europe/Malta"))


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def two_day_records():
    """Brand X page views dropping 100 -> 20 at hour 10"""
    return [
        make_record("X", "2024-06-01", "10", "page_view", total_users=100),
        make_record("X", "2024-06-02", "10", "page_view", total_users=20),
    ]


@pytest.fixture
def alerting_records():
    """Brand Y: NRC events spike 10 -> 60, NDC users drop 12 -> 0, RDC users 5 -> 0"""
    return [
        make_record("Y", "20240601", "08", "Mod_NRC", total_users=3, event_count=10),
        make_record("Y", "20240601", "08", "Mod_NDC", total_users=12),
        make_record("Y", "20240601", "08", "Mod_RDC", total_users=5),
        make_record("Y", "20240602", "08", "Mod_NRC", total_users=3, event_count=60),
    ]


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def source_factory():
    return StaticSource


@pytest.fixture
def clock_at():
    return fixed_clock
