__all__ = [
    "Catalog",
    "Protocol",
    "RankedResult",
    "Settings",
    "SweepError",
    "lookup_servers_n",
    "lookup_ntp_servers_n",
    "rank",
    "repeat_and_average",
    "sweep_once",
]


from .catalog import Catalog
from .config import Settings
from .core import lookup_servers_n, lookup_ntp_servers_n, repeat_and_average, sweep_once
from .errors import SweepError
from .models import Protocol, RankedResult
from .ranking import rank
