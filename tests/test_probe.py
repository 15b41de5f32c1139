import asyncio

import dns.asyncquery
import dns.exception
import pytest

from dnscouch import ntp
from dnscouch.catalog import Catalog
from dnscouch.core import sweep_once
from dnscouch.errors import EndpointError, KissOfDeathError, ProbeError
from dnscouch.models import SECOND, ProbeStatus, Protocol
from dnscouch.probe import probe, probe_dns, probe_ntp


def test_dns_timeout_returns_sentinel(monkeypatch):
    async def fake_udp(q, where, timeout=None, port=53, **kwargs):
        raise dns.exception.Timeout()

    monkeypatch.setattr(dns.asyncquery, "udp", fake_udp)
    result = asyncio.run(probe("9.9.9.10", Protocol.DNS))
    assert result.status is ProbeStatus.TIMEOUT
    assert result.duration_ns == 2 * SECOND
    assert result.error is None


def test_ntp_timeout_returns_sentinel(monkeypatch):
    def fake_query(endpoint, host, port, timeout_s):
        raise TimeoutError("timed out")

    monkeypatch.setattr(ntp, "query", fake_query)
    result = asyncio.run(probe("time.nist.gov", Protocol.NTP))
    assert result.status is ProbeStatus.TIMEOUT
    assert result.duration_ns == 5 * SECOND
    assert result.error is None


def test_dns_probe_sends_a_query_to_default_port(monkeypatch):
    seen = {}

    async def fake_udp(q, where, timeout=None, port=53, **kwargs):
        seen.update(question=q.question[0].to_text(), where=where, port=port, timeout=timeout)

    monkeypatch.setattr(dns.asyncquery, "udp", fake_udp)
    result = asyncio.run(probe_dns("[2620:fe::fe]"))
    assert result.status is ProbeStatus.OK
    assert result.duration_ns >= 0
    assert seen == {"question": "google.com. IN A", "where": "2620:fe::fe", "port": 53, "timeout": 2.0}


def test_dns_probe_over_tcp_keeps_explicit_port(monkeypatch):
    seen = {}

    async def fake_tcp(q, where, timeout=None, port=53, **kwargs):
        seen.update(where=where, port=port)

    monkeypatch.setattr(dns.asyncquery, "tcp", fake_tcp)
    result = asyncio.run(probe_dns("127.0.0.1:5353", transport="tcp"))
    assert result.status is ProbeStatus.OK
    assert seen == {"where": "127.0.0.1", "port": 5353}


def test_dns_connection_error_is_hard(monkeypatch):
    async def fake_udp(q, where, timeout=None, port=53, **kwargs):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(dns.asyncquery, "udp", fake_udp)
    result = asyncio.run(probe_dns("1.1.1.1"))
    assert result.failed
    assert isinstance(result.error, ProbeError)
    assert isinstance(result.error.__cause__, ConnectionRefusedError)


def test_malformed_endpoint_is_hard():
    result = asyncio.run(probe_dns("2620:fe::fe"))
    assert result.failed
    assert isinstance(result.error.__cause__, EndpointError)


def test_unknown_transport_is_a_programming_error():
    with pytest.raises(ValueError):
        asyncio.run(probe_dns("1.1.1.1", transport="quic"))


def test_ntp_probe_uses_default_port(monkeypatch):
    seen = {}

    def fake_query(endpoint, host, port, timeout_s):
        seen.update(endpoint=endpoint, host=host, port=port, timeout_s=timeout_s)

    monkeypatch.setattr(ntp, "query", fake_query)
    result = asyncio.run(probe_ntp("pool.ntp.org"))
    assert result.status is ProbeStatus.OK
    assert seen == {"endpoint": "pool.ntp.org", "host": "pool.ntp.org", "port": 123, "timeout_s": 5.0}


def test_ntp_kiss_of_death_is_hard(monkeypatch):
    def fake_query(endpoint, host, port, timeout_s):
        raise KissOfDeathError(endpoint, "RATE")

    monkeypatch.setattr(ntp, "query", fake_query)
    result = asyncio.run(probe_ntp("pool.ntp.org"))
    assert result.failed
    assert result.error.code == "RATE"


LONG_NAME = "a" * 64 + ".example.com"


def test_unencodable_dns_host_is_hard():
    result = asyncio.run(probe_dns(LONG_NAME))
    assert result.failed
    assert isinstance(result.error, ProbeError)
    assert isinstance(result.error.__cause__, UnicodeError)


@pytest.mark.parametrize("protocol", [Protocol.DNS, Protocol.NTP])
def test_unencodable_host_fails_sweep_as_a_value(protocol):
    sweep = asyncio.run(sweep_once(Catalog({LONG_NAME: "too long"}), protocol))
    assert not sweep.ok
    assert sweep.failed_endpoint == LONG_NAME
    assert isinstance(sweep.error, ProbeError)
    assert sweep.durations == {}
