import logging
import time

from .errors import EndpointError
from .models import MICROSECOND, MILLISECOND, SECOND

logger = logging.getLogger(__name__)

# ────────────────────────────────
# Time Helpers
# ────────────────────────────────


def now_ns() -> int:
    return time.perf_counter_ns()


def format_duration(duration_ns: int, resolution_ns: int = 10 * MICROSECOND) -> str:
    """Render a duration the way a stopwatch would, e.g. ``12.34ms`` or ``2s``."""
    if resolution_ns > 1:
        half = resolution_ns // 2
        duration_ns = (duration_ns + half) // resolution_ns * resolution_ns
    if duration_ns == 0:
        return "0s"
    for unit, scale in (("s", SECOND), ("ms", MILLISECOND), ("µs", MICROSECOND)):
        if duration_ns >= scale:
            text = f"{duration_ns / scale:.6f}".rstrip("0").rstrip(".")
            return f"{text}{unit}"
    return f"{duration_ns}ns"


# ────────────────────────────────
# Endpoint Normalization
# ────────────────────────────────


def split_host_port(endpoint: str) -> tuple[str, int | None]:
    """Split ``host``, ``host:port``, ``[v6]`` or ``[v6]:port``.

    The port is None when the endpoint does not name one. IPv6 literals
    must be bracketed.
    """
    if not endpoint:
        raise EndpointError("empty endpoint")

    if endpoint.startswith("["):
        close = endpoint.find("]")
        if close < 0:
            raise EndpointError(f"{endpoint!r}: missing ']' in address")
        host, rest = endpoint[1:close], endpoint[close + 1 :]
        if not rest:
            port_text = None
        elif rest.startswith(":"):
            port_text = rest[1:]
        else:
            raise EndpointError(f"{endpoint!r}: unexpected text after ']'")
    else:
        if endpoint.count(":") > 1:
            raise EndpointError(f"{endpoint!r}: too many colons in address")
        host, sep, port_text = endpoint.partition(":")
        if not sep:
            port_text = None

    if not host:
        raise EndpointError(f"{endpoint!r}: missing host")
    if port_text is None:
        return host, None
    if not port_text.isdigit() or int(port_text) > 65535:
        raise EndpointError(f"{endpoint!r}: invalid port {port_text!r}")
    return host, int(port_text)


def normalize_endpoint(endpoint: str, default_port: int) -> tuple[str, int]:
    host, port = split_host_port(endpoint)
    if port is None:
        logger.debug(f"Endpoint {endpoint} has no port, using {default_port}")
        port = default_port
    return host, port
