import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from greencredits.api import admin, auth, credits, reports, worker, zones
from greencredits.api.deps import get_repositories, http_error
from greencredits.core.config import get_settings
from greencredits.core.errors import GreenCreditsError
from greencredits.db.mongo import ensure_indexes
from greencredits.jobs.reward_reconciler import reward_reconciler_loop
from greencredits.services.ledger import CreditLedger
from greencredits.services.submission import ReportSubmissionService

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await ensure_indexes()

    stop_event = asyncio.Event()
    task = None
    if settings.reward_reconciler_enabled:
        repos = get_repositories()
        service = ReportSubmissionService(
            repos.reports, repos.users, repos.counters, CreditLedger(repos.credits), settings=settings
        )
        task = asyncio.create_task(
            reward_reconciler_loop(service, settings.reward_scan_interval_seconds, stop_event)
        )
        logger.info("reward reconciler started every %ss", settings.reward_scan_interval_seconds)
    try:
        yield
    finally:
        stop_event.set()
        if task:
            await task


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GreenCreditsError)
async def domain_error_handler(request: Request, exc: GreenCreditsError):
    err = http_error(exc)
    if err.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=err.status_code, content={"detail": err.detail})


app.include_router(auth.router)
app.include_router(reports.router)
app.include_router(credits.router)
app.include_router(zones.router)
app.include_router(admin.router)
app.include_router(worker.router)

# static uploads (report photos)
Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/")
def root():
    return {"ok": True, "docs": "/docs"}
