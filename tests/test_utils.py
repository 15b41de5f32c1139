import pytest

from dnscouch.errors import EndpointError
from dnscouch.models import MICROSECOND, MILLISECOND, SECOND
from dnscouch.utils import format_duration, normalize_endpoint, split_host_port


@pytest.mark.parametrize(
    "endpoint, expected",
    [
        ("1.1.1.1", ("1.1.1.1", None)),
        ("1.1.1.1:5353", ("1.1.1.1", 5353)),
        ("time.nist.gov", ("time.nist.gov", None)),
        ("[2620:fe::fe]", ("2620:fe::fe", None)),
        ("[2620:fe::fe]:853", ("2620:fe::fe", 853)),
    ],
)
def test_split_host_port(endpoint, expected):
    assert split_host_port(endpoint) == expected


@pytest.mark.parametrize(
    "endpoint",
    ["", "2620:fe::fe", "[2620:fe::fe", "[2620:fe::fe]x", "1.1.1.1:dns", "1.1.1.1:70000", ":53"],
)
def test_split_host_port_rejects_malformed(endpoint):
    with pytest.raises(EndpointError):
        split_host_port(endpoint)


def test_normalize_applies_default_port_only_when_missing():
    assert normalize_endpoint("8.8.8.8", 53) == ("8.8.8.8", 53)
    assert normalize_endpoint("8.8.8.8:5300", 53) == ("8.8.8.8", 5300)
    assert normalize_endpoint("pool.ntp.org", 123) == ("pool.ntp.org", 123)


def test_format_duration():
    assert format_duration(0) == "0s"
    assert format_duration(2 * SECOND) == "2s"
    assert format_duration(1_500 * MILLISECOND) == "1.5s"
    assert format_duration(12_345_678) == "12.35ms"
    assert format_duration(850 * MICROSECOND) == "850µs"
    assert format_duration(1_234, resolution_ns=1) == "1.234µs"
    assert format_duration(999, resolution_ns=1) == "999ns"
