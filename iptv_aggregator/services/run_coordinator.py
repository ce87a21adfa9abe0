"""
Run Coordination

Tracks whether an aggregation run is in progress and what the last run
produced. Only one run may execute at a time.
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable

from iptv_aggregator.schemas import UpdateStatus
from iptv_aggregator.services.errors import RunInProgressError


logger = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class RunCoordinator:
    """
    Coordinates aggregation runs to prevent concurrent executions.

    State changes happen synchronously on the event loop thread, so the
    check in `try_begin` and the transition to RUNNING cannot interleave
    with another request.
    """

    def __init__(self):
        """Initialize the coordinator in the idle state."""
        self.state = RunState.IDLE
        self.last_update_time: datetime | None = None
        self.last_status: UpdateStatus | None = None

    def is_running(self) -> bool:
        """
        Check if a run is currently in progress.

        Returns:
            True if a run is executing, False otherwise
        """
        return self.state is RunState.RUNNING

    def try_begin(self) -> bool:
        """
        Move from idle to running.

        Returns:
            False if a run is already in progress
        """
        if self.state is RunState.RUNNING:
            return False
        self.state = RunState.RUNNING
        return True

    def begin(self) -> None:
        """Like try_begin, but raise RunInProgressError when busy."""
        if not self.try_begin():
            raise RunInProgressError("Aggregation run already in progress")

    def finish(self, result: dict) -> UpdateStatus:
        """
        Record the outcome of the current run and return to idle.

        Args:
            result: Result dictionary from run_aggregation

        Returns:
            The recorded status
        """
        now = datetime.now(timezone.utc)
        if "error" in result:
            status = UpdateStatus(success=False, timestamp=now.isoformat(), error=str(result["error"]))
        else:
            self.last_update_time = now
            status = UpdateStatus(
                success=True,
                timestamp=now.isoformat(),
                channel_count=result.get("channel_count"),
                stream_count=result.get("stream_count"),
                outputs_written=result.get("outputs_written"),
            )

        self.last_status = status
        self.state = RunState.IDLE
        return status

    async def run_started(self, run_func: Callable[[], Awaitable[dict]]) -> dict:
        """
        Execute a run that was already admitted with try_begin/begin.

        Exceptions from run_func are recorded as a failed status and re-raised.
        """
        try:
            result = await run_func()
        except Exception as exc:
            logger.error(f"Aggregation run raised: {exc}", exc_info=True)
            self.finish({"error": str(exc)})
            raise
        self.finish(result)
        return result

    async def execute(self, run_func: Callable[[], Awaitable[dict]]) -> Any:
        """
        Execute a run with concurrency protection.

        Args:
            run_func: Async function performing the run (typically run_aggregation)

        Returns:
            Result from run_func, or a skip response if a run is already in progress
        """
        if not self.try_begin():
            logger.warning("Aggregation run already in progress, skipping this request")
            return {
                "status": "skipped",
                "message": "Aggregation run already in progress",
            }

        return await self.run_started(run_func)


# Global singleton instance
_coordinator: RunCoordinator | None = None


def get_run_coordinator() -> RunCoordinator:
    """
    Get or create the global run coordinator singleton.

    Returns:
        The global RunCoordinator instance
    """
    global _coordinator
    if _coordinator is None:
        _coordinator = RunCoordinator()
    return _coordinator


def reset_run_coordinator() -> None:
    """
    Reset the run coordinator (mainly for testing).

    WARNING: Only use this in test environments!
    """
    global _coordinator
    _coordinator = None
