from contextlib import asynccontextmanager
from typing import Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from dnscouch.api.jobs import JobManager, JobRequest, JobStatus
from dnscouch.catalog import CATALOGS

job_manager = JobManager()


@asynccontextmanager
async def lifespan(app: FastAPI):
    job_manager.start()
    yield
    await job_manager.stop()


app = FastAPI(title="dnscouch API", description="Rank public DNS and NTP servers by response time", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/catalogs", response_model=Dict[str, int])
async def list_catalogs():
    return {name: len(catalog) for name, catalog in CATALOGS.items()}


@app.get("/api/catalogs/{name}", response_model=Dict[str, str])
async def get_catalog(name: str):
    catalog = CATALOGS.get(name)
    if catalog is None:
        raise HTTPException(status_code=404, detail="Catalog not found")
    return dict(catalog)


@app.post("/api/jobs", response_model=dict)
async def create_job(request: JobRequest):
    job_id = job_manager.create_job(request)
    return {"job_id": job_id}


@app.get("/api/jobs", response_model=List[JobStatus])
async def list_jobs():
    return job_manager.list_jobs()


@app.get("/api/jobs/{job_id}", response_model=JobStatus)
async def get_job(job_id: str):
    job = job_manager.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@app.delete("/api/jobs/{job_id}")
async def delete_job(job_id: str):
    job = job_manager.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    job_manager.delete_job(job_id)
    return {"status": "deleted"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
