from contextlib import asynccontextmanager
import asyncio
import logging

from fastapi import FastAPI, Request

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from iptv_aggregator import __version__
from iptv_aggregator.config import settings, setup_logging
from iptv_aggregator.services import get_run_coordinator, run_aggregation, update_scheduler

from iptv_aggregator.routers import main_router


setup_logging()
logger = logging.getLogger(__name__)


async def _startup_update() -> None:
    """Run one update right after startup"""
    logger.info("Running startup playlist update...")
    result = await get_run_coordinator().execute(run_aggregation)
    if "error" in result:
        logger.error(f"Startup update failed: {result['error']}")
    else:
        logger.info("Startup update completed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info("="*60)
    logger.info("Starting IPTV Aggregator...")
    logger.info("="*60)

    startup_task: asyncio.Task | None = None
    try:
        logger.info("Starting scheduler...")
        update_scheduler.start()

        if settings.update_on_startup:
            startup_task = asyncio.create_task(_startup_update())

        logger.info("="*60)
        logger.info("IPTV Aggregator started successfully")
        logger.info("="*60)
    except Exception as e:
        logger.error("="*60)
        logger.error(f"Failed to start IPTV Aggregator: {e}", exc_info=True)
        logger.error("="*60)
        raise

    yield

    logger.info("="*60)
    logger.info("Shutting down IPTV Aggregator...")
    logger.info("="*60)

    if startup_task and not startup_task.done():
        startup_task.cancel()
        try:
            await startup_task
        except asyncio.CancelledError:
            logger.info("Startup update cancelled")

    try:
        update_scheduler.shutdown()
    except Exception as e:
        logger.error(f"Error during scheduler shutdown: {e}", exc_info=True)

    logger.info("="*60)
    logger.info("IPTV Aggregator stopped")
    logger.info("="*60)


app = FastAPI(
    title="IPTV Aggregator",
    version=__version__,
    lifespan=lifespan
)

app.include_router(main_router)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reject malformed requests with a compact 422 body"""
    details = [
        {
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input", ""))[:100],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Rejected {request.method} {request.url.path}: {details}")
    return JSONResponse(status_code=422, content={"detail": details})
