import uuid
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime, timedelta

from dnscouch.catalog import NTP_SERVERS, build_dns_catalog
from dnscouch.config import Settings
from dnscouch.core import lookup_ntp_servers_n, lookup_servers_n
from dnscouch.models import RankedResult
from dnscouch.utils import format_duration

logger = logging.getLogger(__name__)

JOB_TTL = timedelta(hours=24)


class JobRequest(BaseModel):
    ntp: bool = False
    count: int = Field(1, ge=1, le=20)
    ipv6: bool = False
    filtered: bool = False
    comcast: bool = False
    transport: str = Field("udp", pattern="^(udp|tcp)$")


class ResultEntry(BaseModel):
    endpoint: str
    description: str
    duration_ns: int
    rtt: str  # e.g., "12.34ms"
    timeouts: int = 0

    @classmethod
    def from_result(cls, r: RankedResult) -> "ResultEntry":
        return cls(
            endpoint=r.endpoint,
            description=r.description,
            duration_ns=r.duration_ns,
            rtt=format_duration(r.duration_ns),
            timeouts=r.timeouts,
        )


class JobStatus(BaseModel):
    id: str
    status: str  # "pending", "running", "completed", "failed"
    request: JobRequest
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    results: List[ResultEntry] = []
    error: Optional[str] = None


Runner = Callable[[JobRequest], Awaitable[List[RankedResult]]]


async def run_request(request: JobRequest) -> List[RankedResult]:
    settings = Settings(count=request.count, transport=request.transport)
    if request.ntp:
        return await lookup_ntp_servers_n(request.count, NTP_SERVERS, settings=settings)
    catalog = build_dns_catalog(ipv6=request.ipv6, filtered=request.filtered, comcast=request.comcast)
    return await lookup_servers_n(catalog, request.count, settings=settings)


class JobManager:
    def __init__(self, runner: Runner = run_request):
        self.runner = runner
        self.jobs: Dict[str, JobStatus] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        if self._cleanup_task is not None:
            tasks.append(self._cleanup_task)
            self._cleanup_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def create_job(self, request: JobRequest) -> str:
        job_id = str(uuid.uuid4())
        self.jobs[job_id] = JobStatus(id=job_id, status="pending", request=request)
        self._tasks[job_id] = asyncio.create_task(self._run_job(job_id))
        return job_id

    async def _run_job(self, job_id: str):
        job = self.jobs[job_id]
        job.status = "running"
        try:
            results = await self.runner(job.request)
            job.results = [ResultEntry.from_result(r) for r in results]
            job.status = "completed"
        except Exception as e:
            logger.error(f"Job {job_id} failed: {e}")
            job.status = "failed"
            job.error = str(e)
        finally:
            job.completed_at = datetime.now()
            self._tasks.pop(job_id, None)

    async def wait(self, job_id: str) -> Optional[JobStatus]:
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        return self.jobs.get(job_id)

    def get_job(self, job_id: str) -> Optional[JobStatus]:
        return self.jobs.get(job_id)

    def list_jobs(self) -> List[JobStatus]:
        return sorted(self.jobs.values(), key=lambda x: x.created_at, reverse=True)

    def delete_job(self, job_id: str):
        task = self._tasks.pop(job_id, None)
        if task is not None:
            task.cancel()
        self.jobs.pop(job_id, None)

    def prune(self, now: Optional[datetime] = None) -> List[str]:
        now = now or datetime.now()
        expired = [job_id for job_id, job in self.jobs.items() if now - job.created_at > JOB_TTL]
        for job_id in expired:
            logger.info(f"Cleaning up old job: {job_id}")
            self.delete_job(job_id)
        return expired

    async def _cleanup_loop(self):
        """Periodically clean up old jobs."""
        while True:
            await asyncio.sleep(3600)  # Check every hour
            self.prune()
