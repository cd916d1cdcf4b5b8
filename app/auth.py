"""API key issuance and the access gate in front of the joke routes."""

import logging
import secrets
import threading
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader

from app.config import API_KEY_HEADER_NAME
from app.errors import Unauthorized
from app.state import get_access_gate

logger = logging.getLogger("jokes_api.auth")

API_KEY_HEADER = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)


def generate_api_key() -> str:
    """Generate a 128-bit random key, hex encoded (32 characters)."""
    return secrets.token_hex(16)


class KeyStore:
    """Set of valid API keys. Keys never expire and are never revoked."""

    def __init__(self):
        self._keys: set[str] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._keys)

    def issue_key(self) -> str:
        api_key = generate_api_key()
        with self._lock:
            self._keys.add(api_key)
        logger.info(
            "New API key issued",
            extra={"event_type": "api_key_issued", "key_count": len(self._keys)},
        )
        return api_key

    def is_valid(self, candidate: Optional[str]) -> bool:
        if not candidate or not isinstance(candidate, str):
            return False
        return candidate in self._keys


class AccessGate:
    """Authorization check placed in front of every joke operation."""

    def __init__(self, key_store: KeyStore):
        self.key_store = key_store

    def authorize(self, presented_key: Optional[str]) -> str:
        """Return the presented key if it was issued by the key store.

        Missing, malformed and unknown keys are all rejected the same way,
        so callers cannot tell which case they hit.

        Raises:
            Unauthorized: If the key is not valid.
        """
        if not self.key_store.is_valid(presented_key):
            raise Unauthorized()
        return presented_key


def require_api_key(
    api_key: Optional[str] = Security(API_KEY_HEADER),
    gate: AccessGate = Depends(get_access_gate),
) -> str:
    """FastAPI dependency guarding the joke routes."""
    return gate.authorize(api_key)
