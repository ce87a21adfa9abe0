from datetime import datetime, timezone
from typing import Annotated, Awaitable, Callable
import logging
import secrets

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query
from fastapi.responses import FileResponse

from iptv_aggregator import __version__
from iptv_aggregator.config import AggregationPaths, settings
from iptv_aggregator.schemas import (
    HealthResponse,
    OutputFiles,
    StatusResponse,
    UpdateAcceptedResponse,
)
from iptv_aggregator.services import get_run_coordinator, run_aggregation, update_scheduler
from iptv_aggregator.services.errors import RunInProgressError
from iptv_aggregator.services.run_coordinator import RunCoordinator


logger = logging.getLogger(__name__)

main_router = APIRouter()

RunFunc = Callable[[], Awaitable[dict]]


def get_paths() -> AggregationPaths:
    """Resolved source/output paths for the running service"""
    return AggregationPaths.from_settings(settings)


def get_admin_token() -> str:
    return settings.admin_token


def get_run_func() -> RunFunc:
    return run_aggregation


def verify_token(
    expected_token: Annotated[str, Depends(get_admin_token)],
    authorization: Annotated[str | None, Header()] = None,
    token: Annotated[str | None, Query()] = None,
) -> None:
    """Accept the admin token as `Authorization: Bearer <token>` or `?token=`"""
    raw_token = authorization or token
    if not raw_token:
        raise HTTPException(status_code=401, detail="Missing token")

    actual_token = raw_token.removeprefix("Bearer ").strip()
    if not secrets.compare_digest(actual_token, expected_token):
        raise HTTPException(status_code=403, detail="Invalid token")


async def _run_in_background(coordinator: RunCoordinator, run_func: RunFunc) -> None:
    """Execute an admitted run; failures are recorded on the coordinator"""
    logger.info("Starting playlist update...")
    try:
        result = await coordinator.run_started(run_func)
    except Exception as exc:
        logger.error(f"Playlist update failed: {exc}")
        return

    if "error" in result:
        logger.error(f"Playlist update failed: {result['error']}")
    else:
        logger.info("Playlist update completed")


@main_router.get("/")
async def root() -> dict:
    """Root endpoint with service information"""
    return {
        "name": "IPTV Aggregator API",
        "version": __version__,
        "endpoints": {
            "GET /health": "Health check",
            "GET /status": "Update status",
            "GET /playlist.m3u": "M3U playlist",
            "GET /playlist.txt": "TXT channel list",
            "POST /update": "Trigger an update (requires token)"
        },
        "usage": {
            "update": 'POST /update -H "Authorization: Bearer YOUR_TOKEN"',
            "update_query": "POST /update?token=YOUR_TOKEN"
        }
    }


@main_router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint"""
    coordinator = get_run_coordinator()
    next_run = update_scheduler.get_next_run_time()
    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        last_update=coordinator.last_update_time.isoformat() if coordinator.last_update_time else None,
        is_updating=coordinator.is_running(),
        scheduler_running=update_scheduler.is_running(),
        next_update=next_run.isoformat() if next_run else None,
    )


@main_router.get("/status", response_model=StatusResponse)
async def get_status(paths: Annotated[AggregationPaths, Depends(get_paths)]) -> StatusResponse:
    """Current update state and output file availability"""
    coordinator = get_run_coordinator()
    return StatusResponse(
        is_updating=coordinator.is_running(),
        last_update=coordinator.last_update_time.isoformat() if coordinator.last_update_time else None,
        last_update_status=coordinator.last_status,
        files=OutputFiles(m3u=paths.m3u_output.exists(), txt=paths.txt_output.exists()),
    )


@main_router.get("/playlist.m3u")
async def get_m3u(paths: Annotated[AggregationPaths, Depends(get_paths)]) -> FileResponse:
    """Download the aggregated M3U playlist"""
    if not paths.m3u_output.exists():
        raise HTTPException(status_code=404, detail="M3U file does not exist, trigger an update first")

    return FileResponse(
        paths.m3u_output,
        media_type="application/vnd.apple.mpegurl",
        headers={"Content-Disposition": 'inline; filename="playlist.m3u"'},
    )


@main_router.get("/playlist.txt")
async def get_txt(paths: Annotated[AggregationPaths, Depends(get_paths)]) -> FileResponse:
    """Download the aggregated TXT channel list"""
    if not paths.txt_output.exists():
        raise HTTPException(status_code=404, detail="TXT file does not exist, trigger an update first")

    return FileResponse(paths.txt_output, media_type="text/plain; charset=utf-8")


@main_router.post("/update", response_model=UpdateAcceptedResponse)
async def trigger_update(
    background_tasks: BackgroundTasks,
    _: Annotated[None, Depends(verify_token)],
    run_func: Annotated[RunFunc, Depends(get_run_func)],
) -> UpdateAcceptedResponse:
    """
    Trigger a playlist update

    Responds immediately; the update runs in the background.
    """
    coordinator = get_run_coordinator()
    try:
        coordinator.begin()
    except RunInProgressError:
        raise HTTPException(status_code=409, detail="Update already in progress, try again later")

    logger.info("Manual playlist update triggered via API")
    background_tasks.add_task(_run_in_background, coordinator, run_func)

    return UpdateAcceptedResponse(
        message="Update task started",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
