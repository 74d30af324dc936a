"""
End-to-end run: health check, submit, poll, download.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional, Union

from .client import VideoGenerationClient
from .config import ClientConfig
from .exceptions import ConnectivityError, NetworkError, ProtocolError, VideoGenError
from .fetcher import DownloadCallback, StreamingFetcher
from .models import GenerateVideoRequest, HealthStatus, Job, JobSubmission, RunReport
from .poller import IntervalJobPoller, JobPoller, ProgressCallback

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Runs one video generation job from submission to a local file.

    Steps run strictly in order and the first failure aborts the run; there is
    no partial result. Observer callbacks are the only way progress leaves the
    orchestrator besides logging.
    """

    def __init__(
        self,
        config: ClientConfig,
        client: Optional[VideoGenerationClient] = None,
        poller: Optional[JobPoller] = None,
        fetcher: Optional[StreamingFetcher] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.client = client or VideoGenerationClient(config)
        self.poller = poller or IntervalJobPoller(
            self.client,
            interval=config.poll_interval,
            deadline=config.poll_timeout,
        )
        self.fetcher = fetcher or StreamingFetcher(config)
        self._clock = clock

    def check_health(self) -> HealthStatus:
        """Call GET /health, converting any failure into a ConnectivityError."""
        endpoint = self.config.url('/health')
        try:
            return self.client.health_check()
        except NetworkError as e:
            raise ConnectivityError(
                f"Health check against {endpoint} failed. Is the server running?",
                endpoint=endpoint,
                timed_out=e.timed_out,
                cause=e,
            ) from e
        except VideoGenError as e:
            raise ConnectivityError(
                f"Health check against {endpoint} failed",
                endpoint=endpoint,
                cause=e,
            ) from e

    def run(
        self,
        request: GenerateVideoRequest,
        output_path: Union[str, Path],
        on_progress: Optional[ProgressCallback] = None,
        on_download: Optional[DownloadCallback] = None,
        on_health: Optional[Callable[[HealthStatus], None]] = None,
        on_submitted: Optional[Callable[[JobSubmission], None]] = None,
        on_completed: Optional[Callable[[Job], None]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RunReport:
        """
        Generate a video and save it locally.

        Args:
            request: Video parameters
            output_path: Where to write the artifact
            on_progress: Receives job status observations
            on_download: Receives the download session after each chunk
            on_health: Receives the health check result
            on_submitted: Receives the submission acknowledgement
            on_completed: Receives the completed job before download starts
            cancel_event: Aborts polling when set

        Returns:
            RunReport describing the downloaded artifact
        """
        started = self._clock()
        output_path = Path(output_path)

        health = self.check_health()
        logger.info(
            f"{health.service} {health.version} is up "
            f"({health.worker.current_jobs}/{health.worker.max_concurrent_jobs} jobs running)"
        )
        if on_health:
            on_health(health)

        submission = self.client.submit_job(request)
        if on_submitted:
            on_submitted(submission)

        job = self.poller.poll(
            submission.job_id,
            deadline=self.config.poll_timeout,
            on_progress=on_progress,
            cancel_event=cancel_event,
        )
        if not job.download_url:
            raise ProtocolError(f"Job {job.id} completed without a downloadUrl")
        if on_completed:
            on_completed(job)

        self.fetcher.fetch(job.download_url, output_path, on_progress=on_download)
        artifact_size = output_path.stat().st_size

        report = RunReport(
            job_id=job.id,
            elapsed=self._clock() - started,
            artifact_path=output_path,
            artifact_size=artifact_size,
            job=job,
        )
        logger.info(f"Job {job.id} finished in {report.elapsed:.2f}s, saved {artifact_size} bytes to {output_path}")
        return report
