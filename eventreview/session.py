"""
Operator session: bearer token plus absolute expiry.

The token is issued elsewhere; this module only keeps it around for 24 hours.
Expiry is checked once, when a stored session is loaded at startup. Requests
made later in the same process are not re-checked.

Stored keys (in a JsonFileStore or MemoryStore):
- auth_token    the bearer token
- token_expiry  absolute expiry in epoch milliseconds
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

from eventreview.errors import NotAuthenticated, StaleSession

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
EXPIRY_KEY = "token_expiry"
TOKEN_TTL_MS = 24 * 60 * 60 * 1000


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class Session:
    """
    Holds the operator's token and persists it through a key-value store.

    `clock` returns the current time in epoch milliseconds (overridable in tests).
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], int] = _now_ms) -> None:
        self._store = store
        self._clock = clock
        self.token: Optional[str] = None
        self.expires_at: Optional[int] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def load(self) -> bool:
        """
        Restore a stored session. Returns True if a valid token was found.

        A stored expiry in the past (or one that cannot be read) clears the store.
        """
        token = self._store.get(TOKEN_KEY)
        expiry_raw = self._store.get(EXPIRY_KEY)
        if not token or not expiry_raw:
            self.token = None
            self.expires_at = None
            return False

        try:
            self._check_expiry(expiry_raw)
        except StaleSession as e:
            logger.info("Discarding stored session: %s", e)
            self._clear_store()
            self.token = None
            self.expires_at = None
            return False

        self.token = token
        self.expires_at = int(expiry_raw)
        return True

    def _check_expiry(self, expiry_raw: str) -> None:
        try:
            expiry = int(expiry_raw)
        except ValueError:
            raise StaleSession(f"unreadable expiry {expiry_raw!r}") from None
        if self._clock() >= expiry:
            raise StaleSession("token expired")

    def login(self, token: str) -> None:
        token = (token or "").strip()
        if not token:
            raise ValueError("Please provide an access token.")
        expiry = self._clock() + TOKEN_TTL_MS
        self._store.set(TOKEN_KEY, token)
        self._store.set(EXPIRY_KEY, str(expiry))
        self.token = token
        self.expires_at = expiry
        logger.info("Logged in; token valid until %s (epoch ms)", expiry)

    def logout(self) -> None:
        self._clear_store()
        self.token = None
        self.expires_at = None
        logger.info("Logged out")

    def require_token(self) -> str:
        if self.token is None:
            raise NotAuthenticated("Not logged in. Run 'eventreview login <token>' first.")
        return self.token

    def _clear_store(self) -> None:
        self._store.delete(TOKEN_KEY)
        self._store.delete(EXPIRY_KEY)
