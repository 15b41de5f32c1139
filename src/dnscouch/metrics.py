import logging
from collections.abc import Sequence

from .models import MetricsCallback, RankedResult, Stats

logger = logging.getLogger(__name__)


def compute_stats(
    results: Sequence[RankedResult],
    metrics_callback: MetricsCallback | None = None,
) -> Stats:
    """Summarize a ranked report. Durations are in seconds; timed-out entries are excluded."""
    total = len(results)
    timed_out = sum(1 for r in results if r.timeouts)
    latencies = sorted(r.duration_s for r in results if not r.timeouts)
    n = len(latencies)
    logger.debug(f"Computing stats: total={total}, timed_out={timed_out}")

    if n == 0:
        stats_dict = {
            "total": total,
            "timed_out": timed_out,
            "mean": None,
            "p50": None,
            "p90": None,
            "min": None,
            "max": None,
        }
        if metrics_callback:
            metrics_callback(stats_dict)
        if total:
            logger.warning("Every endpoint timed out.")
        return Stats(**stats_dict)

    def pct(p):
        return latencies[max(0, min(n - 1, int(p * (n - 1))))]

    stats_dict = {
        "total": total,
        "timed_out": timed_out,
        "mean": sum(latencies) / n,
        "p50": pct(0.50),
        "p90": pct(0.90),
        "min": latencies[0],
        "max": latencies[-1],
    }

    if metrics_callback:
        metrics_callback(stats_dict)

    logger.info(
        f"Stats computed: endpoints={total}, timed_out={timed_out}, "
        f"mean={stats_dict['mean'] * 1000:.2f}ms, p90={stats_dict['p90'] * 1000:.2f}ms"
    )
    return Stats(**stats_dict)
