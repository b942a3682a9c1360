"""Concurrent delivery of independent notifications."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Hashable, Mapping

import structlog

logger = structlog.get_logger(__name__)


def notify_all(jobs: Mapping[Hashable, Callable[[], None]], max_workers: int = 4) -> tuple[int, int]:
    """Run every job in a thread pool and wait for all of them.

    A job that raises is logged and counted; it never stops the others.

    Args:
        jobs: Mapping of a label (used in logs) to a zero-argument callable
        max_workers: Thread pool size

    Returns:
        Tuple of (attempted, failed)
    """
    if not jobs:
        return 0, 0

    failed = 0
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(job): label for label, job in jobs.items()}
        for future in as_completed(futures):
            label = futures[future]
            try:
                future.result()
            except Exception as exc:
                failed += 1
                logger.warning("notification_failed", recipient=label, error=str(exc))

    logger.info("notifications_sent", attempted=len(jobs), failed=failed)
    return len(jobs), failed
