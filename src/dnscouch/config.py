# dnscouch/config.py
import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "DNSCOUCH_"


class Settings(BaseModel):
    """Tunables for a ranking run. Defaults mirror the stock client deadlines."""

    count: int = Field(1, ge=1)
    concurrency: int = Field(16, ge=1)
    transport: Literal["udp", "tcp"] = "udp"
    dns_timeout_s: float = Field(2.0, gt=0)
    ntp_timeout_s: float = Field(5.0, gt=0)
    # NTP servers throttle aggressively (kiss of death: RATE).
    ntp_pause_s: float = Field(2.0, ge=0)
    sweep_timeout_s: Optional[float] = Field(None, gt=0)
    query_name: str = "google.com."

    @classmethod
    def from_env(cls, env_file: str | None = None, **overrides) -> "Settings":
        """Read ``DNSCOUCH_*`` variables (and a ``.env`` file) then apply overrides."""
        load_dotenv(env_file)
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None and raw != "":
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
