#!/usr/bin/env python3
# cli.py — command-line front end for dnscouch

import argparse
import asyncio
import logging

from pydantic import ValidationError
from rich.console import Console

from dnscouch.catalog import NTP_SERVERS, build_dns_catalog
from dnscouch.config import Settings
from dnscouch.core import lookup_ntp_servers_n, lookup_servers_n
from dnscouch.errors import DnsCouchError
from dnscouch.logging_config import setup_logging
from dnscouch.metrics import compute_stats
from dnscouch.rendering import render_latency_histogram, render_plain, render_stats, render_table


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Rank public DNS or NTP servers by response time.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # What to probe
    parser.add_argument(
        "-c",
        "--count",
        type=int,
        default=None,
        help="Number of lookups to make per server (default 1)",
    )
    parser.add_argument(
        "-t",
        "--ntp",
        action="store_true",
        help="Query NTP servers instead of DNS servers",
    )
    parser.add_argument(
        "-6",
        "--ipv6",
        action="store_true",
        help="Query IPv6 servers (DNS only)",
    )
    parser.add_argument(
        "--filtered",
        action="store_true",
        help="Add malware/adult filtering resolvers (DNS only)",
    )
    parser.add_argument(
        "--comcast",
        action="store_true",
        help="Add Comcast resolvers, which only answer inside their network (DNS only)",
    )

    # Probing
    parser.add_argument(
        "--transport",
        choices=("udp", "tcp"),
        default=None,
        help="DNS transport (default udp)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Probes in flight per sweep; 1 probes servers one at a time (default 16)",
    )
    parser.add_argument(
        "--sweep-timeout",
        type=float,
        default=None,
        help="Abort a sweep whose probes are still running after this many seconds",
    )

    # Output
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Print plain text lines instead of a table",
    )
    parser.add_argument(
        "--histogram",
        action="store_true",
        help="Also print a latency histogram and summary",
    )

    # Logging & Debugging
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log sweep progress at info level",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional file to write logs to (e.g., dnscouch.log)",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Read DNSCOUCH_* settings from this file instead of ./.env",
    )

    return parser, parser.parse_args(argv)


async def run(argv=None) -> int:
    parser, args = parse_args(argv)

    log_level = "DEBUG" if args.debug else "INFO" if args.verbose else "WARNING"
    setup_logging(level=log_level, log_file=args.log_file)

    try:
        settings = Settings.from_env(
            args.env_file,
            count=args.count,
            transport=args.transport,
            concurrency=args.concurrency,
            sweep_timeout_s=args.sweep_timeout,
        )
    except ValidationError as e:
        parser.error(str(e))

    console = Console()
    show_progress = not args.plain and console.is_terminal

    if args.ntp:
        catalog = NTP_SERVERS
        title = "NTP servers"
    else:
        catalog = build_dns_catalog(ipv6=args.ipv6, filtered=args.filtered, comcast=args.comcast)
        title = "DNS servers (IPv6)" if args.ipv6 else "DNS servers"

    logging.info(
        f"Starting dnscouch with {len(catalog)} servers | "
        f"Mode: {'NTP' if args.ntp else 'DNS'} | Count: {settings.count} | "
        f"Concurrency: {settings.concurrency}"
    )

    try:
        if args.ntp:
            results = await lookup_ntp_servers_n(
                settings.count, catalog, settings=settings, use_progress_bar=show_progress
            )
        else:
            results = await lookup_servers_n(
                catalog, settings.count, settings=settings, use_progress_bar=show_progress
            )
    except DnsCouchError as e:
        logging.error(f"error: {e}")
        results = []

    if args.plain:
        if results:
            print(render_plain(results))
    else:
        console.print(render_table(results, title=title))

    if args.histogram:
        stats = compute_stats(results)
        print(render_latency_histogram([r.duration_s for r in results if not r.timeouts]))
        print(render_stats(stats))

    return 0


def main():
    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
