class DnsCouchError(Exception):
    """Base class for every error raised by dnscouch."""


class EndpointError(DnsCouchError, ValueError):
    """Endpoint identifier could not be split into host and port."""


class ProbeError(DnsCouchError):
    """A probe failed for a reason other than its deadline."""

    def __init__(self, endpoint: str, message: str):
        super().__init__(f"probe {endpoint!r}: {message}")
        self.endpoint = endpoint


class NTPResponseError(ProbeError):
    """NTP server replied with a packet that does not validate."""


class KissOfDeathError(NTPResponseError):
    def __init__(self, endpoint: str, code: str):
        super().__init__(endpoint, f"kiss of death received: {code}")
        self.code = code


class SweepError(DnsCouchError):
    """A sweep was aborted by a hard probe failure."""

    def __init__(self, endpoint: str, cause: BaseException, partial: dict[str, int] | None = None):
        super().__init__(f"sweep aborted at {endpoint!r}: {cause}")
        self.endpoint = endpoint
        self.cause = cause
        self.partial = dict(partial or {})
