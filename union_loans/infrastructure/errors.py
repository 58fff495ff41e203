"""
Error taxonomy shared by the transport, the adapters and the data-access facade.

Absence of a record is not an error: lookups return None instead.
"""

from __future__ import annotations

from typing import Any

KIND_NETWORK = "network"
KIND_HTTP = "http"
KIND_PERMISSION = "permission"
KIND_APPLICATION = "application"
KIND_AUTHENTICATION = "authentication"
KIND_UNKNOWN = "unknown"


def application_code(payload: Any) -> int | None:
    """The integer ``code`` of a dict body (numeric strings accepted), else None."""
    if not isinstance(payload, dict):
        return None
    code = payload.get("code")
    if not code or isinstance(code, bool):
        return None
    try:
        return int(code)
    except (TypeError, ValueError, OverflowError):
        return None


class BackendError(RuntimeError):
    """Base for every failure raised while talking to a backend."""

    kind = KIND_UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        payload: Any = None,
        response: Any = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload
        self.response = response
        self.original = original


class NetworkError(BackendError):
    """No response was received (connection refused, DNS, timeout)."""

    kind = KIND_NETWORK


class HttpStatusError(BackendError):
    """The server answered with status >= 400."""

    kind = KIND_HTTP


class ApplicationError(BackendError):
    """Success status, but the body carries an application error code >= 400."""

    kind = KIND_APPLICATION

    @property
    def code(self) -> int | None:
        return application_code(self.payload)


class PermissionDeniedError(ApplicationError):
    """Application error code 403: the session may not see or change the record."""

    kind = KIND_PERMISSION


class AuthenticationError(BackendError):
    """Login was rejected by the backend."""

    kind = KIND_AUTHENTICATION


def classify_error(exc: BaseException) -> str:
    """Return the taxonomy kind for an exception; non-backend errors are 'unknown'."""
    if isinstance(exc, BackendError):
        return exc.kind
    return KIND_UNKNOWN


def is_permission_error(exc: BaseException) -> bool:
    return classify_error(exc) == KIND_PERMISSION
