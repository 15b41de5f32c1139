import asyncio
import socket
import threading
import time
from contextlib import contextmanager

import ntplib
import pytest

from dnscouch import ntp
from dnscouch.errors import KissOfDeathError, NTPResponseError, ProbeError
from dnscouch.models import SECOND, ProbeStatus
from dnscouch.probe import probe_ntp

LONG_NAME = "a" * 64 + ".example.com"


def server_packet(**fields):
    packet = ntplib.NTPPacket(version=4, mode=4, tx_timestamp=ntplib.system_to_ntp_time(time.time()))
    packet.stratum = 2
    for name, value in fields.items():
        setattr(packet, name, value)
    return packet


def parsed(**fields):
    stats = ntplib.NTPStats()
    stats.from_data(server_packet(**fields).to_data())
    return stats


@contextmanager
def local_server(reply=None):
    """Answer one request on loopback with ``reply`` (a packet or raw bytes); None stays silent."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5)

    def serve():
        try:
            _, addr = sock.recvfrom(512)
        except OSError:
            return
        if reply is not None:
            data = reply if isinstance(reply, bytes) else reply.to_data()
            sock.sendto(data, addr)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    try:
        yield sock.getsockname()[1]
    finally:
        thread.join(timeout=5)
        sock.close()


def test_query_returns_validated_stats():
    with local_server(server_packet()) as port:
        stats = ntp.query("local", "127.0.0.1", port, 2.0)
    assert stats.stratum == 2
    assert stats.mode == 4


def test_probe_against_local_server():
    with local_server(server_packet()) as port:
        result = asyncio.run(probe_ntp(f"127.0.0.1:{port}", timeout_s=2.0))
    assert result.status is ProbeStatus.OK
    assert 0 <= result.duration_ns < 2 * SECOND


def test_silent_server_times_out():
    with local_server() as port:
        with pytest.raises(TimeoutError):
            ntp.query("local", "127.0.0.1", port, 0.2)


def test_silent_server_gives_sentinel():
    with local_server() as port:
        result = asyncio.run(probe_ntp(f"127.0.0.1:{port}", timeout_s=0.2))
    assert result.status is ProbeStatus.TIMEOUT
    assert result.duration_ns == int(0.2 * SECOND)
    assert result.error is None


def test_kiss_of_death_from_server():
    rate = int.from_bytes(b"RATE", "big")
    with local_server(server_packet(stratum=0, ref_id=rate)) as port:
        result = asyncio.run(probe_ntp(f"127.0.0.1:{port}", timeout_s=2.0))
    assert result.failed
    assert isinstance(result.error, KissOfDeathError)
    assert result.error.code == "RATE"
    assert "kiss of death received: RATE" in str(result.error)


def test_garbage_reply_is_hard():
    with local_server(b"\x24" * 12) as port:
        with pytest.raises(NTPResponseError):
            ntp.query("local", "127.0.0.1", port, 2.0)


def test_unencodable_host_is_hard():
    with pytest.raises(ProbeError):
        ntp.query(LONG_NAME, LONG_NAME, 123, 1.0)

    result = asyncio.run(probe_ntp(LONG_NAME))
    assert result.failed
    assert isinstance(result.error, ProbeError)


def test_good_reply_validates():
    ntp.validate_response("srv", parsed())


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"mode": 3}, "invalid mode"),
        ({"stratum": 17}, "invalid stratum"),
        ({"leap": 3}, "leap"),
        ({"tx_timestamp": 0}, "transmit time"),
    ],
)
def test_invalid_replies(fields, message):
    with pytest.raises(NTPResponseError, match=message):
        ntp.validate_response("srv", parsed(**fields))
