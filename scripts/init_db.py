"""
Script to create the monitoring tables
"""

import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import engine
from core.logging import setup_logging
from models.base import Base
# Register the tables on Base.metadata
import models.metrics  # noqa: F401
import models.monitoring_run  # noqa: F401

logger = logging.getLogger(__name__)


async def init_database():
    """Create hourly_metrics, metric_comparisons, metric_alerts and monitoring_runs"""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()

    logger.info(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
