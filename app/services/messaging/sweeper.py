import asyncio
from datetime import timedelta
from typing import Optional

from app.logging import setup_logger, log_exception
from app.services.messaging.session_store import SessionStore

DEFAULT_CLEANUP_INTERVAL = timedelta(hours=1)


class SessionSweeper:
    """
    Periodically removes expired sessions from a SessionStore.

    Nothing runs until start() is called; stop() cancels the background
    task. run_once() performs a single sweep and can be called directly.
    """

    def __init__(
        self,
        store: SessionStore,
        interval: timedelta = DEFAULT_CLEANUP_INTERVAL,
    ):
        self.logger = setup_logger(__name__)
        self.store = store
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self.last_removed = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        removed = self.store.sweep_expired()
        self.last_removed = removed
        if removed:
            self.logger.info(f"Session sweep removed {removed} expired sessions")
        return removed

    def start(self) -> None:
        if self.running:
            self.logger.debug("Session sweeper already running")
            return

        self._task = asyncio.create_task(self._run())
        self.logger.info(
            f"Started automatic session cleanup (runs every {self.interval})"
        )

    async def stop(self) -> None:
        if self._task is None:
            return

        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.logger.info("Stopped automatic session cleanup")

    async def _run(self) -> None:
        seconds = self.interval.total_seconds()
        while True:
            await asyncio.sleep(seconds)
            try:
                self.run_once()
            except Exception as e:
                log_exception(self.logger, "Error during session cleanup", e)
