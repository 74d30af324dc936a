"""
Utility functions for the video generation client.
"""

import logging
import os
from pathlib import Path
from typing import MutableMapping, Optional
from urllib.parse import urlparse

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


def normalize_base_url(url: str) -> str:
    """
    Normalize an API base URL.

    Args:
        url: URL as typed by the user, scheme optional

    Returns:
        URL without trailing slash, with https:// added when no scheme was given

    Raises:
        ValueError: If the URL is empty or has no host
    """
    url = (url or '').strip()
    if not url:
        raise ValueError("URL is required")

    if not url.startswith('http://') and not url.startswith('https://'):
        url = 'https://' + url

    url = url.rstrip('/')

    parsed = urlparse(url)
    if not parsed.hostname:
        raise ValueError(f"Invalid URL format: {url}")

    return url


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string (e.g., "1h 23m 45s")
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)


def format_bytes(num_bytes: Optional[int]) -> str:
    """
    Format a byte count using binary units.

    Args:
        num_bytes: Number of bytes

    Returns:
        Formatted string (e.g., "1.5 MB")
    """
    if not num_bytes:
        return "0 Bytes"

    sizes = ['Bytes', 'KB', 'MB', 'GB']
    i = min((int(num_bytes).bit_length() - 1) // 10, len(sizes) - 1)
    value = round(num_bytes / (1024 ** i), 2)

    # Drop a trailing .0 so 1024 renders as "1 KB"
    if value == int(value):
        value = int(value)

    return f"{value} {sizes[i]}"


def load_env_file(env_file: str = '.env', environ: Optional[MutableMapping[str, str]] = None) -> bool:
    """
    Load environment variables from .env file.

    Variables that are already set are not overridden.

    Args:
        env_file: Path to the .env file
        environ: Mapping to populate (defaults to os.environ)

    Returns:
        True if the file was found and read
    """
    if environ is None:
        environ = os.environ

    env_path = Path(env_file)
    if not env_path.exists():
        logger.debug(f"Environment file not found: {env_file}")
        return False

    for key, value in dotenv_values(env_path).items():
        # Keys without a value parse as None; existing variables win, even when empty
        if value is not None and key not in environ:
            environ[key] = value

    logger.info(f"Loaded environment variables from {env_file}")
    return True
