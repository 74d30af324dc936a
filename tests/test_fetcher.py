"""
Tests for StreamingFetcher.

Test coverage:
- Full download with Content-Length reports monotonic byte counts
- Download without Content-Length
- Interrupted and short streams leave no file at the destination
- HTTP errors, connection errors, stalls and local write errors
"""

import errno
from unittest.mock import MagicMock, patch

import pytest
import requests
from urllib3.exceptions import ReadTimeoutError

from videogen_client.exceptions import (
    ArtifactWriteError,
    IncompleteDownloadError,
    NetworkError,
    ServerError,
)
from videogen_client.fetcher import StreamingFetcher

from tests.helpers import FakeResponse

URL = "https://cdn.example.com/videos/v.mp4"
CHUNK = 64 * 1024
TEN_MB = 10 * 1024 * 1024


def chunks(total: int, size: int = CHUNK):
    sent = 0
    while sent < total:
        n = min(size, total - sent)
        yield b"\x01" * n
        sent += n


def dropping_stream(sent_bytes: int):
    yield from chunks(sent_bytes)
    raise requests.exceptions.ChunkedEncodingError("Connection broken: IncompleteRead")


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def fetcher(config, session):
    return StreamingFetcher(config, session=session, chunk_size=CHUNK)


class TestFetchSuccess:

    def test_ten_megabyte_download(self, fetcher, session, tmp_path):
        session.get.return_value = FakeResponse(
            200, headers={"Content-Length": str(TEN_MB)}, chunks=chunks(TEN_MB)
        )
        destination = tmp_path / "out.mp4"
        observed = []

        written = fetcher.fetch(URL, destination, on_progress=lambda d: observed.append((d.received_bytes, d.percent)))

        assert written == TEN_MB
        assert destination.stat().st_size == TEN_MB
        counts = [received for received, _ in observed]
        assert counts == sorted(set(counts))
        assert counts[-1] == TEN_MB
        assert observed[-1][1] == 100
        assert not (tmp_path / "out.mp4.part").exists()

    def test_streams_with_inactivity_timeout(self, fetcher, session, config, tmp_path):
        session.get.return_value = FakeResponse(200, chunks=[b"abc"])

        fetcher.fetch(URL, tmp_path / "out.mp4")

        kwargs = session.get.call_args.kwargs
        assert kwargs["stream"] is True
        assert kwargs["timeout"] == (config.request_timeout, config.download_timeout)

    def test_without_content_length(self, fetcher, session, tmp_path):
        session.get.return_value = FakeResponse(200, chunks=[b"abc", b"", b"defg"])
        observed = []

        written = fetcher.fetch(URL, tmp_path / "out.mp4", on_progress=lambda d: observed.append(d.percent))

        assert written == 7
        assert (tmp_path / "out.mp4").read_bytes() == b"abcdefg"
        assert observed == [None, None]

    def test_creates_parent_directories(self, fetcher, session, tmp_path):
        session.get.return_value = FakeResponse(200, chunks=[b"data"])
        destination = tmp_path / "nested" / "dir" / "out.mp4"

        fetcher.fetch(URL, destination)

        assert destination.read_bytes() == b"data"

    def test_replaces_existing_file_only_on_success(self, fetcher, session, tmp_path):
        destination = tmp_path / "out.mp4"
        destination.write_bytes(b"old")
        session.get.return_value = FakeResponse(200, chunks=[b"new content"])

        fetcher.fetch(URL, destination)

        assert destination.read_bytes() == b"new content"


class TestFetchFailure:

    def test_interrupted_stream_leaves_no_artifact(self, fetcher, session, tmp_path):
        four_mb = 4 * 1024 * 1024
        session.get.return_value = FakeResponse(
            200, headers={"Content-Length": str(TEN_MB)}, chunks=dropping_stream(four_mb)
        )
        destination = tmp_path / "out.mp4"

        with pytest.raises(IncompleteDownloadError) as exc_info:
            fetcher.fetch(URL, destination)

        assert exc_info.value.received == four_mb
        assert exc_info.value.expected == TEN_MB
        assert not destination.exists()
        assert not (tmp_path / "out.mp4.part").exists()

    def test_short_stream_is_incomplete(self, fetcher, session, tmp_path):
        session.get.return_value = FakeResponse(200, headers={"Content-Length": "100"}, chunks=[b"x" * 60])
        destination = tmp_path / "out.mp4"

        with pytest.raises(IncompleteDownloadError):
            fetcher.fetch(URL, destination)

        assert not destination.exists()

    def test_interrupted_without_content_length(self, fetcher, session, tmp_path):
        session.get.return_value = FakeResponse(200, chunks=dropping_stream(1024))

        with pytest.raises(NetworkError) as exc_info:
            fetcher.fetch(URL, tmp_path / "out.mp4")

        assert not isinstance(exc_info.value, IncompleteDownloadError)
        assert not (tmp_path / "out.mp4").exists()

    def test_failed_download_keeps_previous_file(self, fetcher, session, tmp_path):
        destination = tmp_path / "out.mp4"
        destination.write_bytes(b"previous complete file")
        session.get.return_value = FakeResponse(
            200, headers={"Content-Length": "4096"}, chunks=dropping_stream(1024)
        )

        with pytest.raises(IncompleteDownloadError):
            fetcher.fetch(URL, destination)

        assert destination.read_bytes() == b"previous complete file"

    def test_stall_is_timeout(self, fetcher, session, tmp_path):
        def stalled():
            yield b"abc"
            raise requests.exceptions.ConnectionError(ReadTimeoutError(None, URL, "Read timed out."))

        session.get.return_value = FakeResponse(200, headers={"Content-Length": "100"}, chunks=stalled())

        with pytest.raises(NetworkError) as exc_info:
            fetcher.fetch(URL, tmp_path / "out.mp4")

        assert exc_info.value.timed_out is True
        assert not (tmp_path / "out.mp4.part").exists()

    def test_http_error(self, fetcher, session, tmp_path):
        session.get.return_value = FakeResponse(410, {"error": "Video expired"})

        with pytest.raises(ServerError) as exc_info:
            fetcher.fetch(URL, tmp_path / "out.mp4")

        assert exc_info.value.status == 410
        assert exc_info.value.reason == "Video expired"
        assert not (tmp_path / "out.mp4").exists()

    def test_connection_error(self, fetcher, session, tmp_path):
        session.get.side_effect = requests.ConnectionError("DNS failure")

        with pytest.raises(NetworkError) as exc_info:
            fetcher.fetch(URL, tmp_path / "out.mp4")

        assert exc_info.value.endpoint == URL

    def test_unwritable_destination(self, fetcher, session, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")

        with pytest.raises(ArtifactWriteError):
            fetcher.fetch(URL, blocker / "out.mp4")

        session.get.assert_not_called()

    def test_disk_full_mid_download(self, fetcher, session, tmp_path):
        dest = tmp_path / "out.mp4"
        session.get.return_value = FakeResponse(
            200, headers={"Content-Length": str(4 * CHUNK)}, chunks=chunks(4 * CHUNK)
        )
        real_open = open

        class FillingFile:
            def __init__(self, f):
                self.f = f
                self.writes = 0

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                self.f.close()

            def write(self, data):
                self.writes += 1
                if self.writes == 2:
                    raise OSError(errno.ENOSPC, "No space left on device")
                return self.f.write(data)

        def filling_open(path, mode="r", *args, **kwargs):
            return FillingFile(real_open(path, mode, *args, **kwargs))

        with patch("videogen_client.fetcher.open", filling_open, create=True):
            with pytest.raises(ArtifactWriteError) as exc_info:
                fetcher.fetch(URL, dest)

        assert isinstance(exc_info.value.cause, OSError)
        assert not dest.exists()
        assert not (tmp_path / "out.mp4.part").exists()


def test_default_session_sends_no_content_type(config):
    fetcher = StreamingFetcher(config)

    assert "Content-Type" not in fetcher.session.headers
