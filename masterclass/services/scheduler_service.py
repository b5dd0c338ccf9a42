"""Reminder scheduling relative to a session start time."""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from functools import partial
from threading import Lock
from typing import Callable, Iterable, List, Optional

from apscheduler.job import Job
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from masterclass.models.reminder import ReminderJob
from masterclass.utils.date_utils import compute_send_time, is_due, seconds_until, utc_now

logger = logging.getLogger(__name__)

SendFn = Callable[[str, str, str], None]

# Day before, day of, one hour, thirty minutes, and a follow-up after the session
REMINDER_OFFSETS = (
    timedelta(hours=-24),
    timedelta(hours=-5),
    timedelta(hours=-1),
    timedelta(minutes=-30),
    timedelta(hours=1),
)


class ReminderQueue:
    """
    Runs each task once at a later time on an in-memory APScheduler.

    The scheduler thread starts with the first enqueued task. Jobs are not
    persisted and are dropped on shutdown.
    """

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None, clock: Callable[[], datetime] = utc_now):
        self.scheduler = scheduler or BackgroundScheduler(
            jobstores={"default": MemoryJobStore()},
            job_defaults={"coalesce": False, "max_instances": 1, "misfire_grace_time": 300},
            timezone=timezone.utc,
        )
        self.clock = clock
        self._lock = Lock()

    def enqueue(self, delay: float, task: Callable[[], None]) -> Job:
        self._ensure_started()
        run_date = self.clock() + timedelta(seconds=delay)
        return self.scheduler.add_job(task, trigger="date", run_date=run_date)

    def _ensure_started(self) -> None:
        with self._lock:
            if not self.scheduler.running:
                self.scheduler.start()
                logger.info("Reminder scheduler started")

    def shutdown(self, wait: bool = False) -> None:
        with self._lock:
            if self.scheduler.running:
                self.scheduler.shutdown(wait=wait)
                logger.info("Reminder scheduler stopped")


class BackgroundRunner:
    """
    Fire-and-forget executor for outbound calls.

    Tasks run on a small thread pool; any exception is logged and dropped so
    a failing or slow collaborator never reaches the request that queued it.
    """

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")

    def submit(self, task: Callable[..., None], *args, **kwargs) -> Future:
        return self._executor.submit(self._run, task, *args, **kwargs)

    @staticmethod
    def _run(task: Callable[..., None], *args, **kwargs) -> None:
        try:
            task(*args, **kwargs)
        except Exception:
            logger.exception("Background task %s failed", getattr(task, "__name__", repr(task)))

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)


class ReminderScheduler:
    """
    Schedules single-shot email sends at an offset from an event time.

    Jobs live only in memory: they cannot be cancelled and are lost when the
    process exits. A job whose send time has already passed is sent at once.
    """

    def __init__(
        self,
        send: SendFn,
        queue: Optional[ReminderQueue] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            send: Side effect invoked as send(recipient, subject, body)
            queue: Delay queue exposing enqueue(delay_seconds, task)
            clock: Returns the current aware datetime
        """
        self.send = send
        self.queue = queue or ReminderQueue(clock=clock)
        self.clock = clock

    def schedule(
        self,
        event_time: datetime,
        offset: timedelta,
        recipient: str,
        subject: str,
        body: str,
    ) -> bool:
        """
        Schedule one reminder.

        Args:
            event_time: Aware session start
            offset: Signed offset from event_time (negative = before)
            recipient: Email address
            subject: Email subject
            body: HTML body

        Returns:
            True if the reminder was sent immediately, False if it was queued
        """
        send_time = compute_send_time(event_time, offset)
        now = self.clock()

        if is_due(send_time, now):
            logger.info(f"Reminder '{subject}' for {recipient} is due, sending now")
            self._fire(recipient, subject, body)
            return True

        delay = seconds_until(send_time, now)
        self.queue.enqueue(delay, partial(self._fire, recipient, subject, body))
        logger.info(f"Reminder '{subject}' for {recipient} queued in {delay:.0f}s")
        return False

    def schedule_jobs(self, event_time: datetime, jobs: Iterable[ReminderJob]) -> List[bool]:
        """Schedule every job; returns the per-job result of schedule()."""
        return [
            self.schedule(event_time, job.offset, job.recipient, job.subject, job.body)
            for job in jobs
        ]

    def _fire(self, recipient: str, subject: str, body: str) -> None:
        try:
            self.send(recipient, subject, body)
        except Exception:
            logger.exception(f"Failed to send reminder '{subject}' to {recipient}")
