"""
Client for the video generation job API.
"""

import logging
from typing import Optional, Union
from urllib.parse import quote

from .config import ClientConfig
from .exceptions import VideoGenError
from .models import GenerateVideoRequest, HealthStatus, Job, JobSubmission
from .transport import AuthenticatedTransport

logger = logging.getLogger(__name__)


class VideoGenerationClient:
    """Typed wrapper around the service's HTTP endpoints."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[AuthenticatedTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration
            transport: Transport to use (built from config if not provided)
        """
        self.config = config
        self.transport = transport or AuthenticatedTransport(config)

    def health_check(self) -> HealthStatus:
        """
        Check the health of the video generation service.

        Returns:
            HealthStatus parsed from GET /health
        """
        try:
            data = self.transport.request_json('GET', '/health', timeout=self.config.health_timeout)
            return HealthStatus.from_dict(data)

        except VideoGenError as e:
            logger.error(f"Health check failed: {e}")
            raise

    def submit_job(self, request: Union[GenerateVideoRequest, dict]) -> JobSubmission:
        """
        Submit a new video generation job.

        The request body is signed. Submissions are never retried.

        Args:
            request: Video parameters

        Returns:
            JobSubmission with the assigned job ID
        """
        body = request.to_dict() if isinstance(request, GenerateVideoRequest) else request

        try:
            data = self.transport.request_json('POST', '/generate-video', body=body)
            submission = JobSubmission.from_dict(data)
            logger.info(f"Submitted job {submission.job_id} ({submission.status})")
            return submission

        except VideoGenError as e:
            logger.error(f"Failed to submit job: {e}")
            raise

    def get_job(self, job_id: str) -> Job:
        """
        Get job status and details.

        Args:
            job_id: ID of the job to retrieve

        Returns:
            Job snapshot
        """
        try:
            data = self.transport.request_json('GET', f'/job/{quote(job_id, safe="")}')
            return Job.from_dict(job_id, data)

        except VideoGenError as e:
            logger.error(f"Failed to get job {job_id}: {e}")
            raise

    def close(self):
        self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
