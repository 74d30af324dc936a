#!/usr/bin/env python3
"""
Command-line utility that exercises a remote video generation API end to end.

It signs and submits a job, polls until the job finishes, downloads the video
and prints a summary.

Usage:
    python scripts/generate_video.py https://your-app.example.com
    python scripts/generate_video.py my-api.example.com --output out.mp4

HMAC_SECRET must be set in the environment or in a .env file and match the
remote server.
"""

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

from tqdm import tqdm

# Add the parent directory to Python path to import videogen_client
sys.path.insert(0, str(Path(__file__).parent.parent))

from videogen_client import ClientConfig, GenerateVideoRequest, Orchestrator
from videogen_client.config import ENV_BASE_URL
from videogen_client.exceptions import ErrorCategory, ServerError, VideoGenError
from videogen_client.models import DownloadSession, HealthStatus, Job, JobStatus, JobSubmission, ProgressUpdate
from videogen_client.signing import mask_secret
from videogen_client.utils import format_bytes, format_duration, load_env_file

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = 'test-output-remote.mp4'
DEFAULT_PROFILE_PHOTO = 'https://pbs.twimg.com/profile_images/1590968738358079488/IY9Gx6Ok_400x400.jpg'


def step(number: int, message: str):
    print(f"\n[{number}/6] {message}")


class ProgressDisplay:
    """Renders job and download progress as tqdm bars."""

    def __init__(self):
        self.job_bar: Optional[tqdm] = None
        self.download_bar: Optional[tqdm] = None

    def on_job_progress(self, update: ProgressUpdate):
        if update.status == JobStatus.PENDING:
            tqdm.write("ℹ️  Job is pending...")
            return

        if self.job_bar is None:
            self.job_bar = tqdm(total=100, unit='%', desc="Generating")

        if update.current_step:
            self.job_bar.set_description(update.current_step)
        # Servers are not guaranteed to report monotonic progress
        self.job_bar.n = max(0, min(100, update.progress))
        self.job_bar.refresh()

        if update.status == JobStatus.COMPLETED:
            self.job_bar.n = 100
            self.job_bar.refresh()

    def on_download(self, download: DownloadSession):
        if self.download_bar is None:
            self.download_bar = tqdm(
                total=download.expected_size,
                unit='B',
                unit_scale=True,
                unit_divisor=1024,
                desc="Downloading video",
            )
        self.download_bar.update(download.received_bytes - self.download_bar.n)

    def finish_job(self):
        if self.job_bar is not None:
            self.job_bar.close()
            self.job_bar = None

    def close(self):
        for bar in (self.job_bar, self.download_bar):
            if bar is not None:
                bar.close()


def print_health(health: HealthStatus):
    worker = health.worker
    jobs = health.jobs
    print("✅ Server is healthy")
    print(f"   Service: {health.service}")
    print(f"   Version: {health.version}")
    print(f"   Uptime: {format_duration(health.uptime)}")
    print(f"   Worker: {'Running' if worker.running else 'Stopped'} "
          f"({worker.current_jobs}/{worker.max_concurrent_jobs} jobs)")
    print(f"   Jobs: {jobs.pending} pending, {jobs.processing} processing, "
          f"{jobs.completed} completed, {jobs.failed} failed")


def print_submission(submission: JobSubmission):
    print(f"✅ Job created: {submission.job_id}")
    print(f"   Status: {submission.status}")
    print(f"   Estimated time: {submission.estimated_completion_time or '30-60s'}")
    step(5, "Polling job status")


def print_completed(job: Job, output: Path):
    print("✅ Job completed successfully!")
    print(f"   Download URL: {job.download_url}")
    print(f"   File Size: {format_bytes(job.file_size)}")
    if job.duration is not None:
        print(f"   Duration: {job.duration}s")
    if job.resolution:
        print(f"   Resolution: {job.resolution}")
    if job.expires_at:
        print(f"   Expires At: {job.expires_at.astimezone().strftime('%Y-%m-%d %H:%M:%S %Z')}")
    step(6, "Downloading video")
    print(f"   Saving to: {output}")


def print_troubleshooting(error: VideoGenError, base_url: Optional[str]):
    """Print hints matching the kind of failure."""
    if error.category == ErrorCategory.NETWORK:
        print("⚠️  Troubleshooting tips:")
        print("  • Verify the URL is correct and accessible")
        print("  • Check if the server is running")
        print("  • Try accessing the /health endpoint in a browser")
        if base_url:
            print(f"  • URL: {base_url}/health")
    elif error.category == ErrorCategory.CONFIG or (
        isinstance(error, ServerError) and error.is_auth_failure
    ):
        print("⚠️  Authentication tips:")
        print("  • Verify HMAC_SECRET matches the remote server")
        print("  • Check that the secret is set in the server's environment variables")
        print("  • Ensure your local .env has the correct secret")
    elif error.category == ErrorCategory.TIMEOUT:
        print("⚠️  Timeout tips:")
        print("  • Video generation may take up to 5 minutes")
        print("  • Check server logs for errors")
        print("  • Verify the worker is running on the remote server")


def build_request(args, base_url: str) -> GenerateVideoRequest:
    tweet_body = args.tweet_body or (
        "Testing the video generation API on remote server!\n\n"
        f"URL: {base_url}\n\n"
        "The deployment is working great! 🚀"
    )
    return GenerateVideoRequest(
        theme=args.theme,
        profile_photo_url=args.profile_photo_url,
        profile_name=args.profile_name,
        username=args.username,
        tweet_body=tweet_body,
    )


def run(args) -> int:
    """Run the end-to-end check; return the process exit code."""
    started = time.monotonic()
    base_url = None
    display = ProgressDisplay()

    print("=" * 60)
    print("  Video Generation API - Remote Server Test")
    print("=" * 60)

    try:
        step(1, "Validating configuration")
        config = ClientConfig.from_env(base_url=args.url)
        base_url = config.base_url
        if args.poll_interval is not None:
            config.poll_interval = args.poll_interval
        if args.timeout is not None:
            config.poll_timeout = args.timeout
        config.check()

        print(f"✅ Remote URL: {config.base_url}")
        print(f"   HMAC Secret: {mask_secret(config.hmac_secret)}")

        step(2, "Testing /health endpoint")
        orchestrator = Orchestrator(config)

        request = build_request(args, config.base_url)
        output = Path(args.output)

        def on_health(health: HealthStatus):
            print_health(health)
            step(3, "Creating video generation request")
            print(f"   Theme: {request.theme}")
            print(f"   Profile: {request.profile_name} (@{request.username})")
            print(f"   Tweet: \"{request.tweet_body[:50]}...\"")
            step(4, "Submitting request to /generate-video")

        def on_completed(job: Job):
            display.finish_job()
            print_completed(job, output)

        report = orchestrator.run(
            request,
            output,
            on_progress=display.on_job_progress,
            on_download=display.on_download,
            on_health=on_health,
            on_submitted=print_submission,
            on_completed=on_completed,
        )
        display.close()

        print("✅ Video downloaded successfully!")
        print(f"   File size: {format_bytes(report.artifact_size)}")
        print(f"   Location: {report.artifact_path}")

        print("\n" + "=" * 60)
        print("  Remote Test Completed Successfully!")
        print("=" * 60)
        print(f"Remote URL: {config.base_url}")
        print(f"Total time: {time.monotonic() - started:.2f}s")
        print(f"Output file: {report.artifact_path}")
        return 0

    except VideoGenError as e:
        display.close()
        print("\n" + "=" * 60)
        print("  Remote Test Failed")
        print("=" * 60)
        print(f"\n❌ {e}\n")
        print_troubleshooting(e, base_url)
        logger.debug("Failure details", exc_info=True)
        return 1


def main():
    parser = argparse.ArgumentParser(
        description="Test a remote video generation API end to end",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s https://my-api.example.com
  %(prog)s http://localhost:3000
  %(prog)s my-api.example.com          (https:// is added)
        """,
    )
    parser.add_argument('url', nargs='?', help='Base URL of the API')
    parser.add_argument('--output', '-o', default=DEFAULT_OUTPUT, help='Where to save the video')
    parser.add_argument('--env-file', default='.env', help='Environment file to load')
    parser.add_argument('--poll-interval', type=float, help='Seconds between status checks')
    parser.add_argument('--timeout', type=float, help='Seconds to wait for the job to finish')
    parser.add_argument('--theme', default='dark', choices=['dark', 'light'], help='Video theme')
    parser.add_argument('--profile-name', default='Example User', help='Display name on the tweet')
    parser.add_argument('--username', default='example', help='Handle on the tweet (without @)')
    parser.add_argument('--profile-photo-url', default=DEFAULT_PROFILE_PHOTO, help='Profile photo URL')
    parser.add_argument('--tweet-body', help='Tweet text')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    load_env_file(args.env_file)

    if not args.url and not os.getenv(ENV_BASE_URL):
        print("Error: No URL provided\n")
        parser.print_help()
        sys.exit(1)

    sys.exit(run(args))


if __name__ == '__main__':
    main()
