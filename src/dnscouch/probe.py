import asyncio
import ipaddress
import logging
import socket

import dns.asyncquery
import dns.exception
import dns.message
import dns.rdatatype

from . import ntp
from .errors import EndpointError, ProbeError
from .models import SECOND, ProbeResult, ProbeStatus, Protocol
from .utils import now_ns, normalize_endpoint

logger = logging.getLogger(__name__)

DEFAULT_QUERY_NAME = "google.com."
DNS_TRANSPORTS = ("udp", "tcp")


def _timeout_result(endpoint: str, timeout_s: float) -> ProbeResult:
    logger.warning(f"Timeout for {endpoint} after {timeout_s:.1f}s")
    return ProbeResult(endpoint, int(timeout_s * SECOND), ProbeStatus.TIMEOUT)


def _error_result(endpoint: str, error: BaseException) -> ProbeResult:
    if not isinstance(error, ProbeError):
        wrapped = ProbeError(endpoint, str(error) or type(error).__name__)
        wrapped.__cause__ = error
        error = wrapped
    logger.debug(f"Probe {endpoint} failed: {error}")
    return ProbeResult(endpoint, 0, ProbeStatus.ERROR, error)


async def _resolve(host: str, port: int) -> str:
    """dnspython wants an address literal; look names up before timing starts."""
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        pass
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    if not infos:
        raise OSError(f"no address for {host}")
    return infos[0][4][0]


async def probe_dns(
    endpoint: str,
    transport: str = "udp",
    timeout_s: float = Protocol.DNS.timeout_ns / SECOND,
    query_name: str = DEFAULT_QUERY_NAME,
) -> ProbeResult:
    """Time a single A query against ``endpoint``."""
    if transport not in DNS_TRANSPORTS:
        raise ValueError(f"unknown DNS transport: {transport}")
    try:
        host, port = normalize_endpoint(endpoint, Protocol.DNS.default_port)
        where = await _resolve(host, port)
    except (EndpointError, OSError, UnicodeError) as e:
        return _error_result(endpoint, e)

    message = dns.message.make_query(query_name, dns.rdatatype.A)
    send = dns.asyncquery.udp if transport == "udp" else dns.asyncquery.tcp

    start = now_ns()
    try:
        await send(message, where, timeout=timeout_s, port=port)
    except (dns.exception.Timeout, TimeoutError):
        return _timeout_result(endpoint, timeout_s)
    except (dns.exception.DNSException, OSError, ValueError) as e:
        return _error_result(endpoint, e)
    elapsed = now_ns() - start
    logger.debug(f"DNS {endpoint} ({transport}) answered in {elapsed}ns")
    return ProbeResult(endpoint, elapsed)


async def probe_ntp(
    endpoint: str,
    timeout_s: float = Protocol.NTP.timeout_ns / SECOND,
) -> ProbeResult:
    """Time a single NTP request against ``endpoint``.

    Only the wall-clock round trip is reported; the server's own timestamps
    merely decide whether the reply is acceptable.
    """
    try:
        host, port = normalize_endpoint(endpoint, Protocol.NTP.default_port)
    except EndpointError as e:
        return _error_result(endpoint, e)

    loop = asyncio.get_running_loop()
    start = now_ns()
    try:
        await loop.run_in_executor(None, ntp.query, endpoint, host, port, timeout_s)
    except TimeoutError:
        return _timeout_result(endpoint, timeout_s)
    except (ProbeError, OSError) as e:
        return _error_result(endpoint, e)
    elapsed = now_ns() - start
    logger.debug(f"NTP {endpoint} answered in {elapsed}ns")
    return ProbeResult(endpoint, elapsed)


async def probe(
    endpoint: str,
    protocol: Protocol,
    transport: str = "udp",
    dns_timeout_s: float = Protocol.DNS.timeout_ns / SECOND,
    ntp_timeout_s: float = Protocol.NTP.timeout_ns / SECOND,
    query_name: str = DEFAULT_QUERY_NAME,
) -> ProbeResult:
    if protocol is Protocol.DNS:
        return await probe_dns(endpoint, transport=transport, timeout_s=dns_timeout_s, query_name=query_name)
    return await probe_ntp(endpoint, timeout_s=ntp_timeout_s)
