"""
Authenticated HTTP transport for the video generation service.
"""

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import ClientConfig
from .exceptions import NetworkError, ProtocolError, ServerError
from .signing import Signer, canonical_json

logger = logging.getLogger(__name__)

TIMESTAMP_HEADER = 'X-Timestamp'
SIGNATURE_HEADER = 'X-Signature'


def build_session(config: ClientConfig, content_type: Optional[str] = 'application/json') -> requests.Session:
    """
    Create a requests session with the client's default headers.

    Pass content_type=None for sessions that only fetch bodiless resources.

    Retries are disabled unless config.max_retries is set, and even then only
    idempotent methods are retried.
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=config.max_retries,
        backoff_factor=0.5,
        status_forcelist=[429, 502, 503, 504],
        allowed_methods=["HEAD", "GET", "OPTIONS"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers['User-Agent'] = config.user_agent
    if content_type:
        session.headers['Content-Type'] = content_type
    return session


def error_message(response: requests.Response) -> str:
    """Pull a human-readable message out of an error response."""
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        for key in ('message', 'error'):
            if data.get(key):
                return str(data[key])

    return response.reason or 'Unknown error'


class AuthenticatedTransport:
    """Issues HTTP requests, signing those that carry a body."""

    def __init__(
        self,
        config: ClientConfig,
        signer: Optional[Signer] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the transport.

        Args:
            config: Client configuration
            signer: Signer to use (built from config.hmac_secret if not provided)
            session: requests session (a configured one is created if not provided)
            clock: Source of wall-clock time, used for X-Timestamp
        """
        self.config = config
        self.signer = signer or Signer(config.hmac_secret)
        self.session = session or build_session(config)
        self._clock = clock

    def send(
        self,
        method: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """
        Send a request and return the successful response.

        Args:
            method: HTTP method
            path: API path relative to the base URL
            body: JSON body; when present the request is signed
            timeout: Override for config.request_timeout

        Returns:
            Response with a 2xx status

        Raises:
            NetworkError: No response was received
            ServerError: The response had a non-2xx status
        """
        url = self.config.url(path)
        timestamp = int(self._clock())
        headers = {TIMESTAMP_HEADER: str(timestamp)}
        data = None

        if body is not None:
            data = canonical_json(body)
            headers[SIGNATURE_HEADER] = self.signer.sign_payload(timestamp, data)
            data = data.encode('utf-8')

        try:
            response = self.session.request(
                method,
                url,
                data=data,
                headers=headers,
                timeout=timeout or self.config.request_timeout,
            )
        except requests.Timeout as e:
            logger.error(f"{method} {url} timed out: {e}")
            raise NetworkError(f"Request to {url} timed out", endpoint=url, timed_out=True, cause=e) from e
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise NetworkError(f"No response from {url}", endpoint=url, cause=e) from e

        if not 200 <= response.status_code < 300:
            message = error_message(response)
            logger.error(f"{method} {url} returned {response.status_code}: {message}")
            raise ServerError(response.status_code, message, endpoint=url)

        return response

    def request_json(
        self,
        method: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Send a request and decode its JSON object body."""
        response = self.send(method, path, body=body, timeout=timeout)
        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(f"Response from {response.url} is not valid JSON", cause=e) from e

        if not isinstance(data, dict):
            raise ProtocolError(f"Response from {response.url} is not a JSON object")
        return data

    def close(self):
        self.session.close()
