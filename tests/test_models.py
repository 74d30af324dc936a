"""
Tests for data models.
"""

from datetime import timezone
from pathlib import Path

import pytest

from videogen_client.exceptions import ProtocolError
from videogen_client.models import (
    DownloadSession,
    HealthStatus,
    Job,
    JobStatus,
    JobSubmission,
    PollSession,
    parse_timestamp,
)


class TestJobStatus:

    def test_terminal_states(self):
        assert JobStatus.COMPLETED.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert not JobStatus.PENDING.is_terminal
        assert not JobStatus.PROCESSING.is_terminal

    def test_unknown_status(self):
        with pytest.raises(ProtocolError):
            JobStatus.parse("queued")


class TestJob:

    def test_from_dict_failed(self):
        job = Job.from_dict("job-1", {"status": "failed", "progress": 35, "error": "encode crashed"})

        assert job.status == JobStatus.FAILED
        assert job.progress == 35
        assert job.error == "encode crashed"
        assert job.download_url is None

    def test_missing_progress_defaults_to_zero(self):
        assert Job.from_dict("job-1", {"status": "pending"}).progress == 0

    def test_to_dict(self):
        job = Job.from_dict("job-1", {"status": "completed", "expiresAt": 1760000000000})

        data = job.to_dict()

        assert data["id"] == "job-1"
        assert data["status"] == "completed"
        assert data["expires_at"].startswith("2025-10-09")


class TestParseTimestamp:

    def test_iso_with_z(self):
        parsed = parse_timestamp("2026-10-19T12:00:00Z")

        assert parsed.tzinfo is not None
        assert parsed.utcoffset().total_seconds() == 0

    def test_epoch_millis(self):
        assert parse_timestamp(0).tzinfo == timezone.utc

    @pytest.mark.parametrize("value", [None, "", "next tuesday"])
    def test_unparseable(self, value):
        assert parse_timestamp(value) is None


def test_submission_requires_job_id():
    with pytest.raises(ProtocolError):
        JobSubmission.from_dict({"status": "pending"})


def test_submission_keeps_raw_status():
    submission = JobSubmission.from_dict({"jobId": "job-1", "status": "queued"})

    assert submission.status == "queued"


@pytest.mark.parametrize("data", [
    {"service": "x", "worker": "ok", "jobs": {}},
    {"service": "x", "worker": {"currentJobs": "several"}},
    {"service": "x", "uptime": "forever"},
])
def test_malformed_health_response(data):
    with pytest.raises(ProtocolError):
        HealthStatus.from_dict(data)


def test_poll_session_observe():
    session = PollSession(job_id="job-1", start_time=0.0, deadline=10.0)
    pending = Job(id="job-1", status=JobStatus.PENDING)

    assert session.observe(pending) is True
    assert session.observe(pending) is False
    assert session.observe(Job(id="job-1", status=JobStatus.PROCESSING, progress=10)) is True


def test_download_session_percent():
    download = DownloadSession(source_url="u", destination=Path("x"), expected_size=200, received_bytes=50)

    assert download.percent == 25
    assert DownloadSession(source_url="u", destination=Path("x")).percent is None
