"""
Script to run one monitoring pass over an exported hourly report
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import async_session_maker, engine
from core.exceptions import PipelineException
from core.logging import setup_logging
from monitoring.extractors.csv_extractor import CSVExtractor
from monitoring.notifiers import LoggingAlertNotifier
from monitoring.runner import MonitoringRunner

logger = logging.getLogger(__name__)


async def run_monitoring(file_path: str) -> int:
    """Run the pipeline once; returns the process exit code"""
    source = CSVExtractor(source_name="hourly_report", file_path=file_path)

    try:
        async with async_session_maker() as session:
            runner = MonitoringRunner(session, notifier=LoggingAlertNotifier())
            result = await runner.run(source)

            logger.info(
                f"Run {result['run_id']} finished: "
                f"Comparisons={result['comparisons_emitted']}, "
                f"Alerts={result['alerts_flagged']}, "
                f"Anomalies={len(result['anomalies'])}"
            )
            return 0

    except PipelineException as e:
        logger.error(f"Monitoring pipeline error: {e}")
        return 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()

    path = sys.argv[1] if len(sys.argv) > 1 else settings.RAW_DATA_PATH
    if not path:
        logger.error("No hourly report given (pass a path or set RAW_DATA_PATH)")
        sys.exit(2)

    sys.exit(asyncio.run(run_monitoring(path)))
