import time
import schedule
from datetime import datetime, timezone
from typing import Callable, Optional
from keepalive.logger import get_logger

class Scheduler:
    """Cron-like timer host for the keep-alive task.

    Jobs registered with ``schedule_minutes(n, ...)`` fire like the cron
    expression ``0 */n * * * *``: at second 0 of every minute-of-hour that is
    a multiple of ``n``, whatever time the process started at.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.logger = get_logger()
        self.scheduler = schedule.Scheduler()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.running = False
        self.invocations = 0
        self.failures = 0

    def _wrap(self, interval_minutes: int, func: Callable, *args, **kwargs) -> Callable:
        name = getattr(func, '__name__', func.__class__.__name__)

        def wrapper():
            # the job wakes up every minute; only grid minutes run the task
            if self.clock().minute % interval_minutes != 0:
                return
            self.invocations += 1
            try:
                self.logger.debug(f"Running scheduled task: {name}")
                func(*args, **kwargs)
            except Exception as e:
                # the task has already logged its own summary line
                self.failures += 1
                self.logger.debug(f"Scheduled task {name} marked failed: {e}")

        return wrapper

    def schedule_minutes(self, interval_minutes: int, func: Callable, *args, **kwargs):
        """Run a function at every minute-of-hour divisible by interval_minutes."""
        job = self.scheduler.every().minute.at(':00').do(self._wrap(interval_minutes, func, *args, **kwargs))
        self.logger.info(f"Scheduled task to run every {interval_minutes} minute(s) on the hour grid")
        return job

    def run_pending(self):
        """Run all pending scheduled jobs."""
        self.scheduler.run_pending()

    def run_continuously(self, interval: int = 1):
        """Run scheduler continuously, checking every interval seconds."""
        self.running = True
        self.logger.info(f"Scheduler started, checking every {interval} seconds")

        while self.running:
            try:
                self.run_pending()
                time.sleep(interval)
            except KeyboardInterrupt:
                self.logger.info("Scheduler stopped by user")
                self.running = False
                break

    def stop(self):
        """Stop the scheduler."""
        self.running = False
        self.scheduler.clear()
        self.logger.info("Scheduler stopped")
