"""
HMAC request signing.

The signed message is "<timestamp>:<canonical JSON body>". The canonical body
is compact JSON (no whitespace, non-ASCII left unescaped) in the mapping's own
key order. That matches what the service computes by re-serialising the parsed
request body, provided the client sends exactly the bytes it signed, which
AuthenticatedTransport does.
"""

import hashlib
import hmac
import json
from typing import Any, Mapping, Optional

from .exceptions import ConfigError


def canonical_json(body: Mapping[str, Any]) -> str:
    """Serialize a request body to its canonical signing form."""
    return json.dumps(body, separators=(',', ':'), ensure_ascii=False, allow_nan=False)


def mask_secret(secret: Optional[str], visible: int = 10) -> str:
    """Show only the first few characters of a secret."""
    if not secret:
        return '<unset>'
    return f"{secret[:visible]}..."


class Signer:
    """Produces HMAC-SHA256 signatures for (timestamp, body) pairs."""

    def __init__(self, secret: Optional[str]):
        if not secret:
            raise ConfigError("HMAC secret is not configured")
        self._key = secret.encode('utf-8')

    def sign_payload(self, timestamp: int, payload: str) -> str:
        """Sign an already-canonicalized body."""
        message = f"{int(timestamp)}:{payload}"
        return hmac.new(self._key, message.encode('utf-8'), hashlib.sha256).hexdigest()

    def sign(self, timestamp: int, body: Mapping[str, Any]) -> str:
        """
        Compute the signature for a request body.

        Args:
            timestamp: Unix time in seconds, generated at send time
            body: JSON-serializable mapping, in wire key order

        Returns:
            Lowercase hex HMAC-SHA256 digest
        """
        return self.sign_payload(timestamp, canonical_json(body))

    def verify(self, timestamp: int, body: Mapping[str, Any], signature: str) -> bool:
        """Check a signature in constant time."""
        expected = self.sign(timestamp, body)
        return hmac.compare_digest(expected, (signature or '').lower())
