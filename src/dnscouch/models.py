import enum
from dataclasses import dataclass, field
from typing import Optional, Any
from collections.abc import Awaitable, Callable

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND


class Protocol(str, enum.Enum):
    DNS = "dns"
    NTP = "ntp"

    @property
    def default_port(self) -> int:
        return 53 if self is Protocol.DNS else 123

    @property
    def timeout_ns(self) -> int:
        # Also the sentinel reported for a probe that hit its deadline.
        return 2 * SECOND if self is Protocol.DNS else 5 * SECOND


class ProbeStatus(str, enum.Enum):
    OK = "ok"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True)
class ProbeResult:
    endpoint: str
    duration_ns: int
    status: ProbeStatus = ProbeStatus.OK
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.status is ProbeStatus.ERROR


@dataclass
class SweepResult:
    """Durations of one pass over a catalog.

    ``durations`` covers every catalog endpoint when ``error`` is None.
    Otherwise it only holds the endpoints dispatched before ``failed_endpoint``.
    """

    durations: dict[str, int] = field(default_factory=dict)
    timed_out: set[str] = field(default_factory=set)
    error: Optional[BaseException] = None
    failed_endpoint: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RankedResult:
    endpoint: str
    description: str
    duration_ns: int
    timeouts: int = 0

    @property
    def duration_s(self) -> float:
        return self.duration_ns / SECOND


@dataclass
class Stats:
    total: int
    timed_out: int
    mean: float | None
    p50: float | None
    p90: float | None
    min: float | None
    max: float | None


# Probe function: (endpoint, protocol) -> ProbeResult
ProbeFunc = Callable[[str, Protocol], Awaitable[ProbeResult]]

# Metrics callback: callable accepting stats dict
MetricsCallback = Callable[[dict[str, Any]], None]
