"""
Test doubles shared across the test suite.
"""

from typing import Dict, Iterable, Optional


class FakeClock:
    """Manually advanced monotonic clock; sleep() moves time forward."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(
        self,
        status_code: int = 200,
        json_data=None,
        headers: Optional[Dict[str, str]] = None,
        chunks: Optional[Iterable[bytes]] = None,
        url: str = "https://api.example.com",
        reason: str = "",
    ):
        self.status_code = status_code
        self._json = json_data
        self.headers = headers or {}
        self._chunks = chunks if chunks is not None else []
        self.url = url
        self.reason = reason
        self.closed = False

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json

    def iter_content(self, chunk_size=1):
        for chunk in self._chunks:
            yield chunk

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
