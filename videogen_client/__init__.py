"""
Video Generation Client Package

A Python client library for submitting signed video generation jobs, polling
them to completion and downloading the resulting video.
"""

__version__ = "0.1.0"

from .client import VideoGenerationClient
from .config import ClientConfig
from .exceptions import (
    ArtifactWriteError,
    ConfigError,
    ConnectivityError,
    ErrorCategory,
    IncompleteDownloadError,
    JobFailedError,
    JobTimeoutError,
    NetworkError,
    ProtocolError,
    ServerError,
    VideoGenError,
)
from .fetcher import StreamingFetcher
from .models import GenerateVideoRequest, Job, JobStatus, RunReport
from .orchestrator import Orchestrator
from .poller import IntervalJobPoller, JobPoller
from .signing import Signer
from .transport import AuthenticatedTransport

__all__ = [
    "VideoGenerationClient",
    "ClientConfig",
    "AuthenticatedTransport",
    "Signer",
    "JobPoller",
    "IntervalJobPoller",
    "StreamingFetcher",
    "Orchestrator",
    "GenerateVideoRequest",
    "Job",
    "JobStatus",
    "RunReport",
    "ErrorCategory",
    "VideoGenError",
    "ConfigError",
    "NetworkError",
    "ConnectivityError",
    "IncompleteDownloadError",
    "ServerError",
    "ProtocolError",
    "JobFailedError",
    "JobTimeoutError",
    "ArtifactWriteError",
]
