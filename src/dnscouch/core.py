import asyncio
import functools
import logging
from collections.abc import Mapping, Sequence

from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn, MofNCompleteColumn

from .catalog import NTP_SERVERS, Catalog
from .config import Settings
from .errors import ProbeError, SweepError
from .models import ProbeFunc, ProbeResult, ProbeStatus, Protocol, RankedResult, SweepResult
from .probe import probe
from .ranking import rank

logger = logging.getLogger(__name__)


def average(sweeps: Sequence[Mapping[str, int]]) -> dict[str, int]:
    """Per-endpoint integer mean over ``sweeps``; the remainder is dropped."""
    if not sweeps:
        raise ValueError("need at least one sweep to average")
    n = len(sweeps)
    return {endpoint: sum(s[endpoint] for s in sweeps) // n for endpoint in sweeps[0]}


class Sweeper:
    def __init__(
        self,
        catalog: Mapping[str, str],
        protocol: Protocol,
        settings: Settings | None = None,
        probe_func: ProbeFunc | None = None,
        use_progress_bar: bool = False,
    ) -> None:
        self.catalog = catalog if isinstance(catalog, Catalog) else Catalog(catalog)
        self.protocol = Protocol(protocol)
        self.settings = settings or Settings()
        self.probe_func = probe_func or functools.partial(
            probe,
            transport=self.settings.transport,
            dns_timeout_s=self.settings.dns_timeout_s,
            ntp_timeout_s=self.settings.ntp_timeout_s,
            query_name=self.settings.query_name,
        )
        self.use_progress_bar = use_progress_bar

        logger.info(
            f"Initialized {self.protocol.value.upper()} sweeper with {len(self.catalog)} endpoints, "
            f"concurrency={self.settings.concurrency}"
        )

    # ────────────────────────────────
    # Single Sweep
    # ────────────────────────────────

    async def _probe_one(
        self,
        endpoint: str,
        sema: asyncio.Semaphore,
        progress: Progress | None,
        task_id,
    ) -> ProbeResult:
        async with sema:
            result = await self.probe_func(endpoint, self.protocol)
        if progress is not None and task_id is not None:
            progress.advance(task_id)
        return result

    async def sweep_once(self) -> SweepResult:
        """Probe every endpoint once.

        Probes run concurrently but are dispatched in sorted order. The
        earliest-dispatched hard failure decides the outcome: probes after
        it are cancelled and the returned durations stop just before it.
        """
        order = self.catalog.ordered()
        loop = asyncio.get_running_loop()
        sema = asyncio.Semaphore(self.settings.concurrency)
        deadline = None
        if self.settings.sweep_timeout_s is not None:
            deadline = loop.time() + self.settings.sweep_timeout_s

        progress = None
        task_id = None
        if self.use_progress_bar:
            progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                transient=True,
            )
            progress.start()
            task_id = progress.add_task(f"[cyan]Probing {self.protocol.value.upper()}...", total=len(order))

        tasks = [asyncio.create_task(self._probe_one(ep, sema, progress, task_id)) for ep in order]
        index = {task: i for i, task in enumerate(tasks)}
        results: list[ProbeResult | None] = [None] * len(order)
        first_error = len(order)
        errors: dict[int, BaseException] = {}
        pending = set(tasks)

        try:
            while pending:
                timeout = None if deadline is None else max(0.0, deadline - loop.time())
                done, pending = await asyncio.wait(pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
                if not done:
                    unresolved = sorted(index[t] for t in pending if index[t] < first_error)
                    if unresolved:
                        first_error = unresolved[0]
                        endpoint = order[first_error]
                        errors[first_error] = ProbeError(endpoint, "unresolved at sweep deadline")
                        logger.warning(f"Sweep deadline passed with {len(unresolved)} probes unresolved")
                    break
                for task in done:
                    if task.cancelled():
                        continue
                    i = index[task]
                    result = task.result()
                    results[i] = result
                    if result.failed and i < first_error:
                        first_error = i
                        errors[i] = result.error
                        for other in pending:
                            if index[other] > i:
                                other.cancel()
        finally:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            if progress:
                progress.stop()

        sweep = SweepResult()
        for i, endpoint in enumerate(order):
            if i == first_error:
                sweep.error = errors[i]
                sweep.failed_endpoint = endpoint
                logger.warning(f"Sweep aborted at {endpoint}: {sweep.error}")
                break
            result = results[i]
            sweep.durations[endpoint] = result.duration_ns
            if result.status is ProbeStatus.TIMEOUT:
                sweep.timed_out.add(endpoint)
        return sweep

    # ────────────────────────────────
    # Repeat & Average
    # ────────────────────────────────

    async def repeat_and_average(self, n: int) -> list[RankedResult]:
        if n < 1:
            raise ValueError(f"sweep count must be at least 1, got {n}")

        sweeps: list[SweepResult] = []
        for i in range(n):
            if i > 0 and self.protocol is Protocol.NTP and self.settings.ntp_pause_s > 0:
                logger.debug(f"Pausing {self.settings.ntp_pause_s:.1f}s before NTP sweep {i + 1}")
                await asyncio.sleep(self.settings.ntp_pause_s)
            logger.info(f"Sweep {i + 1}/{n} over {len(self.catalog)} endpoints")
            sweep = await self.sweep_once()
            if not sweep.ok:
                raise SweepError(sweep.failed_endpoint, sweep.error, sweep.durations)
            sweeps.append(sweep)

        averaged = average([s.durations for s in sweeps])
        timeouts = {ep: sum(ep in s.timed_out for s in sweeps) for ep in averaged}
        results = rank(self.catalog, averaged, timeouts)
        logger.info(f"Run completed: {len(results)} endpoints ranked over {n} sweeps")
        return results


# ────────────────────────────────
# Entry Points
# ────────────────────────────────


async def sweep_once(
    catalog: Mapping[str, str],
    protocol: Protocol,
    settings: Settings | None = None,
    probe_func: ProbeFunc | None = None,
) -> SweepResult:
    return await Sweeper(catalog, protocol, settings=settings, probe_func=probe_func).sweep_once()


async def repeat_and_average(
    catalog: Mapping[str, str],
    protocol: Protocol,
    n: int,
    settings: Settings | None = None,
    probe_func: ProbeFunc | None = None,
    use_progress_bar: bool = False,
) -> list[RankedResult]:
    sweeper = Sweeper(catalog, protocol, settings=settings, probe_func=probe_func, use_progress_bar=use_progress_bar)
    return await sweeper.repeat_and_average(n)


async def lookup_servers_n(catalog: Mapping[str, str], n: int, **kwargs) -> list[RankedResult]:
    """Rank DNS servers by their mean response time over ``n`` sweeps."""
    return await repeat_and_average(catalog, Protocol.DNS, n, **kwargs)


async def lookup_ntp_servers_n(n: int, catalog: Mapping[str, str] = NTP_SERVERS, **kwargs) -> list[RankedResult]:
    """Rank NTP servers by their mean response time over ``n`` sweeps."""
    return await repeat_and_average(catalog, Protocol.NTP, n, **kwargs)
