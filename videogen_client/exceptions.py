"""
Exception types for the video generation client.

Every failure raised by the client derives from VideoGenError and carries a
category so callers (and the command-line script) can decide how to report it.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """
    Classification of client failures.

    Categories:
        CONFIG: Missing secret or malformed URL, detected before any network call
        NETWORK: No response received (refused, DNS, timeout, dropped stream)
        SERVER: A response was received with a non-success status
        PROTOCOL: A response was received but did not match the API contract
        JOB: The job itself reported a terminal failure
        TIMEOUT: The client-side polling deadline passed
        IO: Writing the artifact to local storage failed
    """

    CONFIG = "config"
    NETWORK = "network"
    SERVER = "server"
    PROTOCOL = "protocol"
    JOB = "job"
    TIMEOUT = "timeout"
    IO = "io"


class VideoGenError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Human-readable error description
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.PROTOCOL

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


class ConfigError(VideoGenError):
    """Client configuration is missing or invalid."""

    category = ErrorCategory.CONFIG


# =============================================================================
# Transport errors
# =============================================================================


class NetworkError(VideoGenError):
    """No usable response was received from the endpoint."""

    category = ErrorCategory.NETWORK

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        timed_out: bool = False,
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message, cause, context)
        self.endpoint = endpoint
        self.timed_out = timed_out


class ConnectivityError(NetworkError):
    """The health check failed, so nothing downstream can succeed."""

    pass


class IncompleteDownloadError(NetworkError):
    """The artifact stream ended before the advertised size was received."""

    def __init__(
        self,
        endpoint: str,
        received: int,
        expected: int,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            f"Download from {endpoint} ended early: received {received} of {expected} bytes",
            endpoint=endpoint,
            cause=cause,
            context={"received": received, "expected": expected},
        )
        self.received = received
        self.expected = expected


class ServerError(VideoGenError):
    """The service answered with a non-2xx status."""

    category = ErrorCategory.SERVER

    def __init__(
        self,
        status: int,
        message: str,
        endpoint: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(f"API Error ({status}) from {endpoint}: {message}", context=context)
        self.status = status
        self.reason = message
        self.endpoint = endpoint

    @property
    def is_auth_failure(self) -> bool:
        return self.status in (401, 403)


class ProtocolError(VideoGenError):
    """The service answered, but not in the shape the API contract promises."""

    category = ErrorCategory.PROTOCOL


# =============================================================================
# Job lifecycle errors
# =============================================================================


class JobFailedError(VideoGenError):
    """The job reached the terminal 'failed' state."""

    category = ErrorCategory.JOB

    def __init__(self, job_id: str, reason: str):
        super().__init__(f"Job {job_id} failed: {reason}", context={"job_id": job_id})
        self.job_id = job_id
        self.reason = reason


class JobTimeoutError(VideoGenError):
    """The job did not reach a terminal state before the polling deadline."""

    category = ErrorCategory.TIMEOUT

    def __init__(
        self,
        job_id: str,
        deadline: float,
        elapsed: float,
        last_status: Optional[str] = None,
        cancelled: bool = False,
    ):
        if cancelled:
            message = f"Polling for job {job_id} was cancelled after {elapsed:.1f}s"
        else:
            message = f"Timeout: job {job_id} did not complete within {deadline:g}s"
        if last_status:
            message += f" (last status: {last_status})"
        super().__init__(message, context={"job_id": job_id, "deadline": deadline})
        self.job_id = job_id
        self.deadline = deadline
        self.elapsed = elapsed
        self.last_status = last_status
        self.cancelled = cancelled


class ArtifactWriteError(VideoGenError):
    """Writing the downloaded artifact to local storage failed."""

    category = ErrorCategory.IO

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        super().__init__(f"Failed to write artifact to {path}", cause=cause, context={"path": path})
        self.path = path
