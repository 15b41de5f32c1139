from collections.abc import Sequence

from rich import box
from rich.table import Table

from .models import RankedResult, Stats
from .utils import format_duration


def render_latency_histogram(latencies: Sequence[float], bins: int = 20) -> str:
    if not latencies:
        return "No latency data."
    lo, hi = min(latencies), max(latencies)
    if hi <= lo:
        return f"Histogram: single value {lo * 1000:.2f}ms"

    width = 40
    counts = [0] * bins
    for x in latencies:
        j = int((x - lo) / (hi - lo) * bins)
        if j == bins:
            j -= 1
        counts[j] += 1

    peak = max(counts)
    lines = []
    for i, c in enumerate(counts):
        left = (lo + (hi - lo) * (i / bins)) * 1000
        right = (lo + (hi - lo) * ((i + 1) / bins)) * 1000
        bar = "#" * max(1, int((c / peak) * width)) if c else ""
        lines.append(f"{left:8.2f}ms - {right:8.2f}ms | {bar} ({c})")
    return "Latency Histogram\n" + "\n".join(lines)


def render_plain(results: Sequence[RankedResult]) -> str:
    return "\n".join(f"{format_duration(r.duration_ns)} {r.endpoint} {r.description}" for r in results)


def render_table(results: Sequence[RankedResult], title: str | None = None) -> Table:
    table = Table(title=title, box=box.SQUARE, header_style="bold")
    table.add_column("RTT", justify="right", min_width=8)
    table.add_column("Server", min_width=15)
    table.add_column("Description", min_width=25)
    for r in results:
        rtt = format_duration(r.duration_ns)
        if r.timeouts:
            rtt = f"[yellow]{rtt}[/yellow]"
        table.add_row(rtt, r.endpoint, r.description)
    return table


def render_stats(stats: Stats) -> str:
    if stats.mean is None:
        return f"{stats.total} endpoints, {stats.timed_out} timed out, no answers."
    return (
        f"{stats.total} endpoints, {stats.timed_out} timed out | "
        f"min {stats.min * 1000:.2f}ms | p50 {stats.p50 * 1000:.2f}ms | "
        f"p90 {stats.p90 * 1000:.2f}ms | max {stats.max * 1000:.2f}ms | "
        f"mean {stats.mean * 1000:.2f}ms"
    )
