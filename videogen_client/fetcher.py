"""
Streaming download of generated artifacts.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Optional, Union

import requests
from urllib3.exceptions import ReadTimeoutError

from .config import ClientConfig
from .exceptions import (
    ArtifactWriteError,
    IncompleteDownloadError,
    NetworkError,
    ServerError,
)
from .models import DownloadSession
from .transport import build_session, error_message

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
PART_SUFFIX = '.part'

DownloadCallback = Callable[[DownloadSession], None]


def content_length(response: requests.Response) -> Optional[int]:
    """Return the Content-Length header as an int, or None if absent or invalid."""
    value = response.headers.get('Content-Length')
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _is_stall(error: requests.RequestException) -> bool:
    # requests reports a read timeout during iter_content as a ConnectionError
    if isinstance(error, requests.Timeout):
        return True
    return any(isinstance(arg, ReadTimeoutError) for arg in error.args)


class StreamingFetcher:
    """
    Downloads a URL to a local file without buffering it in memory.

    Data is written to "<destination>.part" and only renamed onto the
    destination once the whole body has arrived, so a file at the destination
    path is always complete. Partial files are removed on failure.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: Optional[requests.Session] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.config = config
        self.session = session or build_session(config, content_type=None)
        self.chunk_size = chunk_size

    def fetch(
        self,
        url: str,
        destination: Union[str, Path],
        on_progress: Optional[DownloadCallback] = None,
    ) -> int:
        """
        Stream a URL into a file.

        Args:
            url: Absolute URL of the artifact
            destination: Final path of the file
            on_progress: Called with the DownloadSession after each chunk

        Returns:
            Number of bytes written

        Raises:
            NetworkError: Connection failed, stalled, or ended early
            ServerError: The artifact URL returned a non-2xx status
            ArtifactWriteError: The file could not be written
        """
        destination = Path(destination)
        part_path = destination.with_name(destination.name + PART_SUFFIX)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArtifactWriteError(str(destination), cause=e) from e

        logger.info(f"Downloading {url} to {destination}")

        try:
            response = self.session.get(
                url,
                stream=True,
                headers={'Accept-Encoding': 'identity'},
                # The read timeout bounds inactivity between chunks, not total time
                timeout=(self.config.request_timeout, self.config.download_timeout),
            )
        except requests.Timeout as e:
            logger.error(f"Download of {url} timed out: {e}")
            raise NetworkError(f"Download from {url} timed out", endpoint=url, timed_out=True, cause=e) from e
        except requests.RequestException as e:
            logger.error(f"Download of {url} failed: {e}")
            raise NetworkError(f"No response from {url}", endpoint=url, cause=e) from e

        with response:
            if not 200 <= response.status_code < 300:
                message = error_message(response)
                logger.error(f"Download of {url} returned {response.status_code}: {message}")
                raise ServerError(response.status_code, message, endpoint=url)

            download = DownloadSession(
                source_url=url,
                destination=destination,
                expected_size=content_length(response),
            )

            try:
                self._copy(response, part_path, download, on_progress)
            except BaseException:
                self._discard(part_path)
                raise

        logger.info(f"Downloaded {download.received_bytes} bytes to {destination}")
        return download.received_bytes

    def _copy(
        self,
        response: requests.Response,
        part_path: Path,
        download: DownloadSession,
        on_progress: Optional[DownloadCallback],
    ):
        url = download.source_url
        try:
            with open(part_path, 'wb') as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if not chunk:
                        continue
                    f.write(chunk)
                    download.received_bytes += len(chunk)
                    logger.debug(f"Received {download.received_bytes} bytes from {url}")
                    if on_progress:
                        on_progress(download)
        except requests.RequestException as e:
            if _is_stall(e):
                logger.error(f"Download of {url} stalled after {download.received_bytes} bytes")
                raise NetworkError(
                    f"Download from {url} stalled for {self.config.download_timeout:g}s",
                    endpoint=url, timed_out=True, cause=e,
                ) from e
            logger.error(f"Download of {url} interrupted after {download.received_bytes} bytes: {e}")
            if download.expected_size is not None:
                raise IncompleteDownloadError(url, download.received_bytes, download.expected_size, cause=e) from e
            raise NetworkError(f"Download from {url} was interrupted", endpoint=url, cause=e) from e
        except OSError as e:
            logger.error(f"Failed writing {part_path}: {e}")
            raise ArtifactWriteError(str(download.destination), cause=e) from e

        if download.expected_size is not None and download.received_bytes < download.expected_size:
            logger.error(
                f"Download of {url} ended at {download.received_bytes} of {download.expected_size} bytes"
            )
            raise IncompleteDownloadError(url, download.received_bytes, download.expected_size)

        try:
            os.replace(part_path, download.destination)
        except OSError as e:
            raise ArtifactWriteError(str(download.destination), cause=e) from e

    @staticmethod
    def _discard(part_path: Path):
        try:
            part_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial download {part_path}: {e}")
