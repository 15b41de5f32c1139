import logging
from collections.abc import Mapping

from .models import RankedResult

logger = logging.getLogger(__name__)


def rank(
    catalog: Mapping[str, str],
    averaged: Mapping[str, int],
    timeouts: Mapping[str, int] | None = None,
) -> list[RankedResult]:
    """Join averaged durations with descriptions, fastest first.

    Every endpoint in ``averaged`` gets an entry. The sort is stable, so
    ties keep the order of ``averaged``.
    """
    timeouts = timeouts or {}
    results = [
        RankedResult(endpoint, catalog.get(endpoint, ""), duration, timeouts.get(endpoint, 0))
        for endpoint, duration in averaged.items()
    ]
    results.sort(key=lambda r: r.duration_ns)
    logger.debug(f"Ranked {len(results)} endpoints")
    return results
