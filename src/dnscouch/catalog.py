"""Static catalogs of public DNS and NTP servers.

Catalogs are immutable. A front end that wants extra providers builds a new
catalog with :meth:`Catalog.merged` instead of mutating a shared one.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType


class Catalog(Mapping[str, str]):
    """Read-only mapping of endpoint identifier to description."""

    def __init__(self, servers: Mapping[str, str] | None = None, name: str = "") -> None:
        self._servers = MappingProxyType(dict(servers or {}))
        self.name = name

    def __getitem__(self, endpoint: str) -> str:
        return self._servers[endpoint]

    def __iter__(self) -> Iterator[str]:
        return iter(self._servers)

    def __len__(self) -> int:
        return len(self._servers)

    def __repr__(self) -> str:
        return f"Catalog(name={self.name!r}, servers={len(self)})"

    def merged(self, *others: Mapping[str, str], name: str | None = None) -> "Catalog":
        """Return a new catalog with ``others`` layered on top; later entries win."""
        servers = dict(self._servers)
        names = [self.name]
        for other in others:
            servers.update(other)
            names.append(getattr(other, "name", ""))
        return Catalog(servers, name=name if name is not None else "+".join(n for n in names if n))

    def ordered(self) -> list[str]:
        """Endpoint identifiers in dispatch order."""
        return sorted(self._servers)


DNS_SERVERS_V4 = Catalog(
    {
        "1.1.1.1": "Cloudflare One",
        "1.0.0.1": "Cloudflare One",
        "8.8.8.8": "Google Primary",
        "8.8.4.4": "Google Secondary",
        "208.67.222.222": "OpenDNS Primary",
        "208.67.220.220": "OpenDNS Secondary",
        "4.2.2.1": "Level 3",
        "209.244.0.3": "Level 3",
        "209.244.0.4": "Level 3",
        "9.9.9.10": "Quad9 unfiltered",
        "149.112.112.10": "Quad9 unfiltered",
        "68.94.156.1": "ATT Primary",
        "68.94.157.1": "ATT Secondary",
        "12.121.117.201": "ATT Services",
        "8.26.56.26": "Comodo Primary",
        "8.20.247.20": "Comodo Secondary",
        "76.76.2.0": "Control D Primary",
        "76.76.10.0": "Control D Secondary",
        "185.228.168.9": "Clean Browsing Primary",
        "185.228.169.9": "Clean Browsing Secondary",
        "76.76.19.19": "Alternate DNS Primary",
        "76.223.122.150": "Alternate DNS Secondary",
        "94.140.14.14": "AdGuard DNS Primary",
        "94.140.15.15": "AdGuard DNS Secondary",
    },
    name="dns4",
)

# Level 3, ATT and Comodo publish no IPv6 resolvers.
DNS_SERVERS_V6 = Catalog(
    {
        "[2606:4700:4700::1111]": "Cloudflare One",
        "[2606:4700:4700::1001]": "Cloudflare One",
        "[2001:4860:4860::8888]": "Google Primary",
        "[2001:4860:4860::8844]": "Google Secondary",
        "[2620:119:35::35]": "OpenDNS Primary",
        "[2620:119:53::53]": "OpenDNS Secondary",
        "[2620:fe::fe]": "Quad9 unfiltered",
        "[2620:fe::9]": "Quad9 unfiltered",
        "[2606:1a40::]": "Control D Primary",
        "[2606:1a40:1::]": "Control D Secondary",
        "[2a0d:2a00:1::]": "Clean Browsing Primary",
        "[2a0d:2a00:2::]": "Clean Browsing Secondary",
        "[2602:fcbc::ad]": "Alternate DNS Primary",
        "[2602:fcbc:2::ad]": "Alternate DNS Secondary",
        "[2a10:50c0::ad1:ff]": "AdGuard DNS Primary",
        "[2a10:50c0::ad2:ff]": "AdGuard DNS Secondary",
    },
    name="dns6",
)

FILTERED_DNS_SERVERS = Catalog(
    {
        "1.1.1.2": "Cloudflare Malware Filtered",
        "1.0.0.2": "Cloudflare Malware Filtered",
        "1.1.1.3": "Cloudflare Adult Filtered",
        "1.0.0.3": "Cloudflare Adult Filtered",
        "9.9.9.9": "Quad9 filtered Primary",
        "149.112.112.112": "Quad9 filtered Secondary",
        # EDNS Client-Subnet, not a filter.
        "9.9.9.11": "Quad9 ecs unfiltered",
        "149.112.112.11": "Quad9 ecs unfiltered",
    },
    name="filtered",
)

# Only answers from inside the Comcast network.
COMCAST_DNS_SERVERS = Catalog(
    {
        "75.75.75.75": "Comcast Primary",
        "75.75.76.76": "Comcast Secondary",
        "68.87.85.102": "Comcast older Primary",
        "68.87.64.150": "Comcast older Secondary",
    },
    name="comcast",
)

FILTERED_DNS_SERVERS_V6 = Catalog(
    {
        "[2606:4700:4700::1112]": "Cloudflare Malware Filtered",
        "[2606:4700:4700::1002]": "Cloudflare Malware Filtered",
        "[2606:4700:4700::1113]": "Cloudflare Adult Filtered",
        "[2606:4700:4700::1003]": "Cloudflare Adult Filtered",
        "[2620:fe::11]": "Quad9 ecs unfiltered",
        "[2620:fe::fe:11]": "Quad9 ecs unfiltered",
    },
    name="filtered6",
)

COMCAST_DNS_SERVERS_V6 = Catalog(
    {
        "[2001:558:feed::1]": "Comcast Primary IPv6",
        "[2001:558:feed::2]": "Comcast Secondary IPv6",
    },
    name="comcast6",
)

NTP_SERVERS = Catalog(
    {
        "time.cloudflare.com": "Cloudflare time",
        "ntp.ubuntu.com": "NTP Ubuntu",
        "0.ubuntu.pool.ntp.org": "NTP Ubuntu 0",
        "1.ubuntu.pool.ntp.org": "NTP Ubuntu 1",
        "2.ubuntu.pool.ntp.org": "NTP Ubuntu 2",
        "ntp.nexcess.net": "NexcessNet",
        "time.nist.gov": "NIST",
        "pool.ntp.org": "NTP org pool",
        "0.pool.ntp.org": "NTP org pool 0",
        "1.pool.ntp.org": "NTP org pool 1",
        "2.pool.ntp.org": "NTP org pool 2",
        "time1.google.com": "Google time",
        "time2.google.com": "Google time",
        "time3.google.com": "Google time",
        "time4.google.com": "Google time",
        "time.windows.com": "Windows time",
        "time.apple.com": "Apple time",
        "ntp1.hetzner.de": "Hetzner Online 1",
        "ntp2.hetzner.de": "Hetzner Online 2",
        "ntp3.hetzner.de": "Hetzner Online 3",
        "ntp.ripe.net": "RIPE",
        "clock.isc.org": "ISC",
        "0.amazon.pool.ntp.org": "Amazon 0",
        "1.amazon.pool.ntp.org": "Amazon 1",
        "2.amazon.pool.ntp.org": "Amazon 2",
        "3.amazon.pool.ntp.org": "Amazon 3",
    },
    name="ntp",
)

CATALOGS: dict[str, Catalog] = {
    c.name: c
    for c in (
        DNS_SERVERS_V4,
        DNS_SERVERS_V6,
        FILTERED_DNS_SERVERS,
        FILTERED_DNS_SERVERS_V6,
        COMCAST_DNS_SERVERS,
        COMCAST_DNS_SERVERS_V6,
        NTP_SERVERS,
    )
}


def build_dns_catalog(ipv6: bool = False, filtered: bool = False, comcast: bool = False) -> Catalog:
    """Base catalog for one address family plus the same family's extensions."""
    base = DNS_SERVERS_V6 if ipv6 else DNS_SERVERS_V4
    extensions = []
    if filtered:
        extensions.append(FILTERED_DNS_SERVERS_V6 if ipv6 else FILTERED_DNS_SERVERS)
    if comcast:
        extensions.append(COMCAST_DNS_SERVERS_V6 if ipv6 else COMCAST_DNS_SERVERS)
    return base.merged(*extensions) if extensions else base
