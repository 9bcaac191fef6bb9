"""Admin authentication store.

Credential checks are delegated to a :class:`CredentialVerifier`. The
bundled :class:`StaticCredentialVerifier` accepts a single configured
email/password pair and is a placeholder: deployments should inject a
verifier that asks the storefront backend instead.
"""

from __future__ import annotations

import hmac
import logging
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from pytienda._constants import (
    AUTH_STORAGE_KEY,
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_ID,
    DEFAULT_ADMIN_NAME,
    DEFAULT_ADMIN_PASSWORD,
)
from pytienda._redact import redact_for_log
from pytienda.models.user import User, UserRole
from pytienda.state.base import PersistedStore
from pytienda.storage import KeyValueStorage

_logger = logging.getLogger(__name__)


class CredentialVerifier(Protocol):
    """Resolves credentials to a user, or ``None`` when they are rejected."""

    async def verify(self, email: str, password: str) -> User | None: ...


class StaticCredentialVerifier:
    """Accepts exactly one email/password pair and yields an admin record."""

    def __init__(
        self,
        email: str = DEFAULT_ADMIN_EMAIL,
        password: str = DEFAULT_ADMIN_PASSWORD,
        *,
        user: User | None = None,
    ) -> None:
        self._email = email
        self._password = password
        self._user = user or User(
            id=DEFAULT_ADMIN_ID,
            email=email,
            name=DEFAULT_ADMIN_NAME,
            role=UserRole.ADMIN,
        )

    async def verify(self, email: str, password: str) -> User | None:
        email_ok = hmac.compare_digest(email.encode(), self._email.encode())
        password_ok = hmac.compare_digest(password.encode(), self._password.encode())
        if email_ok and password_ok:
            return self._user
        return None


class AuthState(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: User | None = None
    authenticated: bool = False
    hydrated: bool = False


class AuthStore(PersistedStore[AuthState]):
    """Holds the current user; ``authenticated`` is true iff a user is set."""

    persisted_fields = frozenset({"user", "authenticated"})

    def __init__(
        self,
        *,
        storage: KeyValueStorage,
        key: str = AUTH_STORAGE_KEY,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        super().__init__(AuthState(), storage=storage, key=key)
        self._verifier: CredentialVerifier = verifier or StaticCredentialVerifier()

    @property
    def user(self) -> User | None:
        return self._state.user

    @property
    def authenticated(self) -> bool:
        return self._state.authenticated

    async def login(self, email: str, password: str) -> bool:
        """Check credentials; on success store the user and return ``True``.

        A rejected login, or a verifier that raises, leaves the state
        unchanged and returns ``False``.
        """
        _logger.debug("Login attempt %s", redact_for_log({"email": email, "password": password}))
        try:
            user = await self._verifier.verify(email, password)
        except Exception:
            _logger.warning("Credential verifier failed for %s", email, exc_info=True)
            return False

        if user is None:
            _logger.info("Login rejected for %s", email)
            return False

        self._set(user=user, authenticated=True)
        _logger.info("Logged in as %s (%s)", user.email, user.role)
        return True

    def logout(self) -> None:
        self._set(user=None, authenticated=False)

    def check_auth(self) -> bool:
        """``True`` iff a user is present and it is an admin."""
        user = self._state.user
        return user is not None and user.is_admin

    def _partialize(self) -> dict[str, Any]:
        user = self._state.user
        return {
            "user": user.model_dump(mode="json") if user is not None else None,
            "isAuthenticated": self._state.authenticated,
        }

    def _restore(self, snapshot: dict[str, Any]) -> dict[str, Any]:
        raw_user = snapshot.get("user")
        user = User.model_validate(raw_user) if raw_user is not None else None
        # The flag is derived, whatever the snapshot says.
        return {"user": user, "authenticated": user is not None}

    def _empty(self) -> dict[str, Any]:
        return {"user": None, "authenticated": False}
