import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from genmemo.consts import VERSION
from genmemo.domain.constants import DEFAULT_SESSION_SIZE

if TYPE_CHECKING:
    from genmemo.application.review_service import ReviewService
    from genmemo.application.sync_service import SyncReconciler

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("genmemo.server")


@dataclass
class Runtime:
    """Services shared by all requests of one daemon process."""

    review: "ReviewService"
    reconciler: "SyncReconciler"
    session_size: int = DEFAULT_SESSION_SIZE


_runtime: Runtime | None = None


def get_runtime() -> Runtime:
    global _runtime
    if _runtime is None:
        from genmemo.application.config import resolve_config
        from genmemo.application.factory import get_ledger, get_reconciler, get_review_service

        config = resolve_config()
        ledger = get_ledger(config)
        _runtime = Runtime(
            review=get_review_service(config, ledger),
            reconciler=get_reconciler(config, ledger),
            session_size=config.session_size,
        )
    return _runtime


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"GenMemo Server v{VERSION} starting up...")
    yield
    # Shutdown
    if _runtime is not None:
        await _runtime.reconciler.close()
    logger.info("GenMemo Server shutting down...")


app = FastAPI(
    title="GenMemo Server",
    description="Local daemon exposing review scheduling and progress sync.",
    version=VERSION,
    lifespan=lifespan,
)


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class ReviewItemResponse(BaseModel):
    key: int
    mastery: int
    interval_days: float
    next_review_due: str
    streak: int
    correct_days: int


class AnswerRequest(BaseModel):
    key: int
    correct: bool


class SyncResultResponse(BaseModel):
    result: str
    count: int = 0


class SyncStatusResponse(BaseModel):
    state: str
    error: str | None = None


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


def _item_response(key, item) -> ReviewItemResponse:
    return ReviewItemResponse(
        key=key,
        mastery=item.mastery,
        interval_days=item.interval_days,
        next_review_due=item.next_review_due.isoformat(),
        streak=item.streak,
        correct_days=item.correct_days,
    )


@app.get("/collections/{collection_id}/select", response_model=list[ReviewItemResponse])
async def select_items(collection_id: str, count: int | None = None):
    runtime = get_runtime()
    size = count if count is not None else runtime.session_size
    records = runtime.review.select_session(collection_id, size)
    return [_item_response(r.item_key, r.item) for r in records]


@app.post("/collections/{collection_id}/answers", response_model=ReviewItemResponse)
async def post_answer(collection_id: str, req: AnswerRequest):
    item = get_runtime().review.process_answer(collection_id, req.key, req.correct)
    return _item_response(req.key, item)


@app.post("/collections/{collection_id}/decay")
async def post_decay(collection_id: str):
    return {"decayed": get_runtime().review.apply_decay_to_overdue(collection_id)}


def _sync_response(result) -> SyncResultResponse:
    from genmemo.domain.models import Error, NotAuthenticated, NothingToSync, Success

    if isinstance(result, Success):
        return SyncResultResponse(result="success", count=result.count)
    if isinstance(result, NothingToSync):
        return SyncResultResponse(result="nothing_to_sync")
    if isinstance(result, NotAuthenticated):
        raise HTTPException(status_code=401, detail="Not authenticated")
    if isinstance(result, Error):
        raise HTTPException(status_code=502, detail=result.message)
    raise HTTPException(status_code=500, detail=f"Unexpected sync result: {result!r}")


@app.post("/collections/{collection_id}/upload", response_model=SyncResultResponse)
async def upload_progress(collection_id: str):
    logger.info(f"Upload requested via API: {collection_id}")
    return _sync_response(await get_runtime().reconciler.upload(collection_id))


@app.post("/collections/{collection_id}/download", response_model=SyncResultResponse)
async def download_progress(collection_id: str):
    logger.info(f"Download requested via API: {collection_id}")
    return _sync_response(await get_runtime().reconciler.download(collection_id))


@app.get("/collections/{collection_id}/sync-status", response_model=SyncStatusResponse)
async def sync_status(collection_id: str):
    status = get_runtime().reconciler.status(collection_id)
    return SyncStatusResponse(state=status.state.value, error=status.error)
