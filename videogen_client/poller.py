"""
Job status polling.

JobPoller is the interface the orchestrator depends on; IntervalJobPoller
implements it by querying GET /job/{id} at a fixed interval. Another
notification mechanism (long-poll, push) can be dropped in behind the same
poll() contract.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .client import VideoGenerationClient
from .config import DEFAULT_POLL_INTERVAL, DEFAULT_POLL_TIMEOUT
from .exceptions import JobFailedError, JobTimeoutError
from .models import Job, JobStatus, PollSession, ProgressUpdate

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressUpdate], None]


class JobPoller(ABC):
    """Waits for a submitted job to reach a terminal state."""

    @abstractmethod
    def poll(
        self,
        job_id: str,
        deadline: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Job:
        """
        Block until the job completes.

        Args:
            job_id: ID of the submitted job
            deadline: Seconds to wait before giving up
            on_progress: Called once per distinct (status, progress) observation
            cancel_event: When set, polling stops with a cancelled JobTimeoutError

        Returns:
            The completed Job snapshot

        Raises:
            JobFailedError: The job reported 'failed'
            JobTimeoutError: The deadline passed or polling was cancelled
            NetworkError, ServerError: A status request failed
        """


class IntervalJobPoller(JobPoller):
    """Polls job status at a fixed interval."""

    def __init__(
        self,
        client: VideoGenerationClient,
        interval: float = DEFAULT_POLL_INTERVAL,
        deadline: float = DEFAULT_POLL_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.interval = interval
        self.deadline = deadline
        self._clock = clock
        self._sleep = sleep

    def poll(
        self,
        job_id: str,
        deadline: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Job:
        session = PollSession(
            job_id=job_id,
            start_time=self._clock(),
            deadline=self.deadline if deadline is None else deadline,
        )
        logger.info(f"Polling job {job_id} every {self.interval:g}s (deadline {session.deadline:g}s)")

        while True:
            elapsed = self._clock() - session.start_time
            if cancel_event is not None and cancel_event.is_set():
                raise self._timeout(session, elapsed, cancelled=True)
            if elapsed > session.deadline:
                raise self._timeout(session, elapsed)

            job = self.client.get_job(job_id)
            session.polls += 1

            if session.observe(job):
                update = ProgressUpdate(
                    job_id=job_id,
                    status=job.status,
                    progress=job.progress,
                    current_step=job.current_step,
                    elapsed=elapsed,
                )
                logger.info(
                    f"Job {job_id}: {job.status.value} {job.progress}%"
                    + (f" - {job.current_step}" if job.current_step else "")
                )
                if on_progress:
                    on_progress(update)

            if job.status == JobStatus.COMPLETED:
                logger.info(f"Job {job_id} completed after {session.polls} polls")
                return job

            if job.status == JobStatus.FAILED:
                reason = job.error or 'Unknown error'
                logger.error(f"Job {job_id} failed: {reason}")
                raise JobFailedError(job_id, reason)

            if self._wait(cancel_event):
                raise self._timeout(session, self._clock() - session.start_time, cancelled=True)

    def _wait(self, cancel_event: Optional[threading.Event]) -> bool:
        """Suspend for one interval; return True if cancelled meanwhile."""
        if cancel_event is not None:
            return cancel_event.wait(self.interval)
        self._sleep(self.interval)
        return False

    def _timeout(self, session: PollSession, elapsed: float, cancelled: bool = False) -> JobTimeoutError:
        last_status = session.last_status.value if session.last_status else None
        if cancelled:
            logger.warning(f"Polling for job {session.job_id} cancelled")
        else:
            logger.error(f"Job {session.job_id} did not finish within {session.deadline:g}s")
        return JobTimeoutError(
            session.job_id,
            session.deadline,
            elapsed,
            last_status=last_status,
            cancelled=cancelled,
        )
