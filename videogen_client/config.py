"""
Configuration for the video generation client.

All tunables are collected in ClientConfig and passed into each component at
construction; components never read the process environment themselves.
"""

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from .exceptions import ConfigError
from .utils import normalize_base_url

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_POLL_TIMEOUT = 5 * 60.0
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_HEALTH_TIMEOUT = 10.0
DEFAULT_DOWNLOAD_TIMEOUT = 60.0

ENV_BASE_URL = 'VIDEOGEN_API_URL'
ENV_SECRET = 'HMAC_SECRET'


@dataclass
class ClientConfig:
    """
    Settings shared by the transport, poller, fetcher and orchestrator.

    Attributes:
        base_url: Base URL of the video generation service
        hmac_secret: Shared secret used to sign request bodies
        poll_interval: Seconds to wait between job status checks
        poll_timeout: Seconds after which polling gives up
        request_timeout: Timeout for control calls (submit, status)
        health_timeout: Timeout for the health check
        download_timeout: Maximum seconds of inactivity while streaming the artifact
        max_retries: Retries for idempotent requests (0 disables retries)
        user_agent: Value of the User-Agent header
    """
    base_url: str
    hmac_secret: Optional[str] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_timeout: float = DEFAULT_POLL_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    health_timeout: float = DEFAULT_HEALTH_TIMEOUT
    download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT
    max_retries: int = 0
    user_agent: str = 'videogen-client/0.1.0'

    def __post_init__(self):
        try:
            self.base_url = normalize_base_url(self.base_url)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    @classmethod
    def from_env(
        cls,
        base_url: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        Args:
            base_url: Overrides VIDEOGEN_API_URL when given
            env: Mapping to read from (defaults to os.environ)

        Returns:
            ClientConfig instance
        """
        if env is None:
            env = os.environ

        base_url = base_url or env.get(ENV_BASE_URL)
        if not base_url:
            raise ConfigError(f"No API URL given and {ENV_BASE_URL} is not set")

        try:
            return cls(
                base_url=base_url,
                hmac_secret=env.get(ENV_SECRET),
                poll_interval=float(env.get('VIDEOGEN_POLL_INTERVAL', DEFAULT_POLL_INTERVAL)),
                poll_timeout=float(env.get('VIDEOGEN_POLL_TIMEOUT', DEFAULT_POLL_TIMEOUT)),
                request_timeout=float(env.get('VIDEOGEN_REQUEST_TIMEOUT', DEFAULT_REQUEST_TIMEOUT)),
                health_timeout=float(env.get('VIDEOGEN_HEALTH_TIMEOUT', DEFAULT_HEALTH_TIMEOUT)),
                download_timeout=float(env.get('VIDEOGEN_DOWNLOAD_TIMEOUT', DEFAULT_DOWNLOAD_TIMEOUT)),
                max_retries=int(env.get('VIDEOGEN_MAX_RETRIES', 0)),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting in environment: {e}") from e

    def url(self, path: str) -> str:
        """Join an API path onto the base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def validate(self) -> List[str]:
        """
        Validate the configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.hmac_secret:
            errors.append(f"{ENV_SECRET} is not set")

        for name in ('poll_interval', 'poll_timeout', 'request_timeout',
                     'health_timeout', 'download_timeout'):
            if getattr(self, name) <= 0:
                errors.append(f"{name} must be positive")

        if self.max_retries < 0:
            errors.append("max_retries cannot be negative")

        return errors

    def check(self) -> "ClientConfig":
        """Raise ConfigError if the configuration is not usable."""
        errors = self.validate()
        if errors:
            raise ConfigError("Invalid configuration: " + "; ".join(errors))
        return self
