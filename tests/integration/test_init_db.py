"""
Table creation script
"""

import pytest
from unittest.mock import patch
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine
from scripts.init_db import init_database


@pytest.mark.asyncio
async def test_init_database_creates_all_tables(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'monitor.db'}"

    with patch("scripts.init_db.engine", create_async_engine(url)):
        await init_database()

    engine = create_async_engine(url)
    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    await engine.dispose()

    assert set(tables) == {"hourly_metrics", "metric_comparisons", "metric_alerts", "monitoring_runs"}
