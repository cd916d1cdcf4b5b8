"""User registration."""

import hashlib
import logging
import threading
from typing import Optional

from app.auth import KeyStore
from app.errors import ValidationError
from app.models import User

logger = logging.getLogger("jokes_api.users")


def hash_password(password: str) -> str:
    """Hash a password using SHA-256; the cleartext is never stored."""
    return hashlib.sha256(password.encode()).hexdigest()


class UserRegistry:
    """Registered users. Each successful registration issues one API key.

    Usernames are not required to be unique.
    """

    def __init__(self, key_store: KeyStore):
        self.key_store = key_store
        self._users: list[User] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._users)

    def users(self) -> list[User]:
        return list(self._users)

    def register(self, username: Optional[str], password: Optional[str]) -> str:
        """Record a new user and return a freshly issued API key.

        Raises:
            ValidationError: If the username or password is empty.
        """
        if not username or not password:
            raise ValidationError("Username and password are required.")

        user = User(username=username, password_hash=hash_password(password))
        with self._lock:
            self._users.append(user)
        api_key = self.key_store.issue_key()

        logger.info(
            "User registered",
            extra={"event_type": "user_registered", "username": username},
        )
        return api_key
