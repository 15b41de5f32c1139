"""
Quick sanity check: rank the IPv4 resolvers plus the filtered ones.
Run: uv run examples/rank_resolvers.py
"""
import asyncio
import os

from dnscouch import Settings, lookup_servers_n
from dnscouch.catalog import DNS_SERVERS_V4, FILTERED_DNS_SERVERS
from dnscouch.rendering import render_plain


async def main():
    catalog = DNS_SERVERS_V4.merged(FILTERED_DNS_SERVERS)
    settings = Settings(
        count=int(os.getenv("SWEEPS", "3")),
        concurrency=8,
        sweep_timeout_s=30.0,
    )
    results = await lookup_servers_n(catalog, settings.count, settings=settings)
    print(render_plain(results))

if __name__ == "__main__":
    asyncio.run(main())
