"""
Structured logging helpers for consistent log formatting.

Provides utilities for structured, clean logging without excessive decorative separators.
"""
import logging
from datetime import datetime, timezone


def log_run_start(logger: logging.Logger, date: str) -> None:
    """
    Log the start of a pipeline run.

    Args:
        logger: Logger instance
        date: Schedule date being processed
    """
    logger.info(f"Show pipeline started at {datetime.now(timezone.utc).isoformat()} for {date}")


def log_run_end(logger: logging.Logger, date: str) -> None:
    """Log the end of a pipeline run."""
    logger.info(f"Show pipeline completed at {datetime.now(timezone.utc).isoformat()} for {date}")


def log_source_processing(logger: logging.Logger, idx: int, total: int, source: str) -> None:
    """
    Log source processing header.

    Args:
        logger: Logger instance
        idx: Current source index (1-based)
        total: Total number of sources
        source: Schedule source being processed ('network' or 'web')
    """
    logger.info(f"Processing source {idx}/{total}: {source} schedule")


def log_filter_summary(
    logger: logging.Logger,
    fetched_count: int,
    listed_count: int,
    network_count: int
) -> None:
    """
    Log filtering and grouping summary.

    Args:
        logger: Logger instance
        fetched_count: Shows normalized from all sources
        listed_count: Shows left after filtering
        network_count: Number of network groups
    """
    logger.info(
        f"Filter summary - Fetched: {fetched_count}, Listed: {listed_count}, Networks: {network_count}"
    )
