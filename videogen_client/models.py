"""
Data models for the video generation client.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Any, Union

from .exceptions import ProtocolError


class JobStatus(Enum):
    """Status of a video generation job."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    @classmethod
    def parse(cls, value: Any) -> "JobStatus":
        try:
            return cls(value)
        except ValueError:
            raise ProtocolError(f"Unknown job status: {value!r}") from None


def parse_timestamp(value: Union[str, int, float, None]) -> Optional[datetime]:
    """
    Parse an absolute timestamp from the API.

    Accepts ISO-8601 strings (with or without a trailing 'Z') and epoch
    milliseconds. Returns None for missing or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    try:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass
class GenerateVideoRequest:
    """Body of a POST /generate-video call."""
    theme: str
    profile_photo_url: str
    profile_name: str
    username: str
    tweet_body: str

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the wire representation.

        Key order is part of the signing contract and must stay fixed.
        """
        return {
            "theme": self.theme,
            "profilePhotoUrl": self.profile_photo_url,
            "profileName": self.profile_name,
            "username": self.username,
            "tweetBody": self.tweet_body,
        }


@dataclass
class JobSubmission:
    """Acknowledgement returned when a job is accepted."""
    job_id: str
    # Informational only; the job is tracked through polling
    status: str
    estimated_completion_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobSubmission":
        if not data.get("jobId"):
            raise ProtocolError("Submission response did not include a jobId")
        estimate = data.get("estimatedCompletionTime")
        return cls(
            job_id=str(data["jobId"]),
            status=str(data.get("status") or "pending"),
            estimated_completion_time=str(estimate) if estimate is not None else None,
        )


@dataclass
class Job:
    """Snapshot of a job as last reported by the service."""
    id: str
    status: JobStatus
    progress: int = 0
    current_step: Optional[str] = None
    error: Optional[str] = None
    download_url: Optional[str] = None
    file_size: Optional[int] = None
    duration: Optional[float] = None
    resolution: Optional[str] = None
    expires_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, job_id: str, data: Dict[str, Any]) -> "Job":
        status = JobStatus.parse(data.get("status"))
        progress = data.get("progress")
        file_size = data.get("fileSize")
        duration = data.get("duration")
        try:
            return cls(
                id=job_id,
                status=status,
                progress=int(progress) if progress is not None else 0,
                current_step=data.get("currentStep"),
                error=data.get("error"),
                download_url=data.get("downloadUrl"),
                file_size=int(file_size) if file_size is not None else None,
                duration=float(duration) if duration is not None else None,
                resolution=data.get("resolution"),
                expires_at=parse_timestamp(data.get("expiresAt")),
                raw=dict(data),
            )
        except (TypeError, ValueError) as e:
            raise ProtocolError(f"Malformed status for job {job_id}: {e}", cause=e) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert job to dictionary representation."""
        return {
            "id": self.id,
            "status": self.status.value,
            "progress": self.progress,
            "current_step": self.current_step,
            "error": self.error,
            "download_url": self.download_url,
            "file_size": self.file_size,
            "duration": self.duration,
            "resolution": self.resolution,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


@dataclass
class WorkerInfo:
    running: bool
    current_jobs: int
    max_concurrent_jobs: int


@dataclass
class JobCounts:
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0


@dataclass
class HealthStatus:
    """Response of GET /health."""
    service: str
    version: str
    uptime: float
    worker: WorkerInfo
    jobs: JobCounts

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthStatus":
        worker = data.get("worker") or {}
        jobs = data.get("jobs") or {}
        if not isinstance(worker, dict) or not isinstance(jobs, dict):
            raise ProtocolError("Health response has malformed worker or jobs fields")
        try:
            return cls(
                service=data.get("service", "unknown"),
                version=data.get("version", "unknown"),
                uptime=float(data.get("uptime") or 0),
                worker=WorkerInfo(
                    running=bool(worker.get("running", False)),
                    current_jobs=int(worker.get("currentJobs", 0)),
                    max_concurrent_jobs=int(worker.get("maxConcurrentJobs", 0)),
                ),
                jobs=JobCounts(
                    pending=int(jobs.get("pending", 0)),
                    processing=int(jobs.get("processing", 0)),
                    completed=int(jobs.get("completed", 0)),
                    failed=int(jobs.get("failed", 0)),
                ),
            )
        except (TypeError, ValueError) as e:
            raise ProtocolError(f"Malformed health response: {e}", cause=e) from e


@dataclass(frozen=True)
class ProgressUpdate:
    """A change in (status, progress) observed while polling."""
    job_id: str
    status: JobStatus
    progress: int
    current_step: Optional[str]
    elapsed: float


@dataclass
class PollSession:
    """Client-side state of one polling loop."""
    job_id: str
    start_time: float
    deadline: float
    last_status: Optional[JobStatus] = None
    last_progress: Optional[int] = None
    polls: int = 0

    def observe(self, job: Job) -> bool:
        """Record a snapshot; return True if (status, progress) changed."""
        changed = job.status != self.last_status or job.progress != self.last_progress
        self.last_status = job.status
        self.last_progress = job.progress
        return changed


@dataclass
class DownloadSession:
    """Client-side state of one artifact download."""
    source_url: str
    destination: Path
    expected_size: Optional[int] = None
    received_bytes: int = 0

    @property
    def percent(self) -> Optional[int]:
        if not self.expected_size:
            return None
        return min(100, round(self.received_bytes * 100 / self.expected_size))


@dataclass
class RunReport:
    """Final result of a submit, poll and download run."""
    job_id: str
    elapsed: float
    artifact_path: Path
    artifact_size: int
    job: Job

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "elapsed": round(self.elapsed, 2),
            "artifact_path": str(self.artifact_path),
            "artifact_size": self.artifact_size,
            "job": self.job.to_dict(),
        }
