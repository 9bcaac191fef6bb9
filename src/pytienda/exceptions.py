"""Custom exception hierarchy for pytienda."""

from __future__ import annotations


class TiendaError(Exception):
    """Base exception for all pytienda errors."""


class TiendaConfigError(TiendaError):
    """Invalid or missing configuration."""


class TiendaStorageError(TiendaError):
    """Persisted snapshot could not be read or written."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class TiendaTransportError(TiendaError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class TiendaApiError(TiendaError):
    """API answered with an ``{"error": ...}`` body (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class TiendaAuthenticationError(TiendaError):
    """Operation requires an authenticated user."""
