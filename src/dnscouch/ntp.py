"""NTP exchange through ntplib, plus the checks a careful client applies to a reply."""

import logging

import ntplib

from .errors import KissOfDeathError, NTPResponseError, ProbeError

logger = logging.getLogger(__name__)

NTP_VERSION = 4
MODE_SERVER = 4
LEAP_NOT_IN_SYNC = 3
MAX_STRATUM = 16


def kiss_code(ref_id: int) -> str:
    return ref_id.to_bytes(4, "big").decode("ascii", errors="replace").rstrip("\x00")


def validate_response(endpoint: str, stats: ntplib.NTPStats) -> None:
    """Reject replies a well-behaved client must not trust."""
    if stats.mode != MODE_SERVER:
        raise NTPResponseError(endpoint, f"invalid mode in response: {stats.mode}")
    if stats.stratum == 0:
        raise KissOfDeathError(endpoint, kiss_code(stats.ref_id))
    if stats.stratum > MAX_STRATUM:
        raise NTPResponseError(endpoint, f"invalid stratum in response: {stats.stratum}")
    if stats.leap == LEAP_NOT_IN_SYNC:
        raise NTPResponseError(endpoint, "invalid leap second")
    if stats.tx_timestamp == 0:
        raise NTPResponseError(endpoint, "invalid transmit time in response")


def query(endpoint: str, host: str, port: int, timeout_s: float) -> ntplib.NTPStats:
    """Blocking NTP exchange. Raises TimeoutError when the deadline passes."""
    client = ntplib.NTPClient()
    try:
        stats = client.request(host, version=NTP_VERSION, port=port, timeout=timeout_s)
    except ntplib.NTPException as e:
        # ntplib turns a socket timeout into a plain NTPException.
        if isinstance(e.__context__, TimeoutError):
            raise TimeoutError(str(e)) from e
        raise NTPResponseError(endpoint, str(e)) from e
    except (OSError, UnicodeError) as e:
        raise ProbeError(endpoint, str(e) or type(e).__name__) from e

    validate_response(endpoint, stats)
    logger.debug(f"NTP {endpoint}: stratum={stats.stratum}, version={stats.version}")
    return stats
