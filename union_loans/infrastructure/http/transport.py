"""
HTTP transport shared by both backend adapters.

Attaches the stored session to every request and turns every failure into a
`BackendError` subclass. Exactly one attempt is made per call.
"""

from __future__ import annotations

from typing import Any, Mapping

import requests

from union_loans.infrastructure.errors import (
    ApplicationError,
    HttpStatusError,
    NetworkError,
    PermissionDeniedError,
    application_code,
)
from union_loans.infrastructure.session import SessionStore
from union_loans.utils.config import BackendConfig
from union_loans.utils.logger import get_logger

logger = get_logger()

SESSION_HEADER = "X-Session-ID"
PERMISSION_CODE = 403

_MAX_DEBUG_BODY_CHARS = 2000


def _decode_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return (response.text or "")[:_MAX_DEBUG_BODY_CHARS]


def raise_for_application_error(payload: Any, response: Any = None) -> None:
    """
    Raise when a success-status body carries an application error code.

    Code 403 is a permission failure; any other code >= 400 is a generic one.
    """
    code = application_code(payload)
    if code is None:
        return
    if code == PERMISSION_CODE:
        raise PermissionDeniedError(
            payload.get("msg") or payload.get("message") or "Permission error",
            status=code,
            payload=payload,
            response=response,
        )
    if code >= 400:
        raise ApplicationError(
            payload.get("msg") or payload.get("message") or "API error",
            status=code,
            payload=payload,
            response=response,
        )


class TransportClient:
    """
    Thin wrapper over `requests` bound to one backend.

    Args:
        config: Resolved backend configuration (base URL, timeout).
        session_store: Source of the session id; None sends anonymous requests.
    """

    def __init__(self, config: BackendConfig, session_store: SessionStore | None = None) -> None:
        self._config = config
        self._session_store = session_store

    @property
    def config(self) -> BackendConfig:
        return self._config

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        session_id = self._session_store.session_id() if self._session_store else None
        if session_id:
            # Some backends read the header, others only the cookie.
            headers[SESSION_HEADER] = session_id
            headers["Cookie"] = f"session_id={session_id}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """
        Perform one HTTP call and return the decoded JSON body (None when empty).

        Raises:
            NetworkError: No response was received.
            HttpStatusError: Status >= 400.
            PermissionDeniedError: Body carries application code 403.
            ApplicationError: Body carries another application code >= 400.
        """
        url = self._config.url(path)
        logger.debug("%s %s params=%s", method, url, dict(params) if params else None)
        try:
            response = requests.request(
                method,
                url,
                params=dict(params) if params else None,
                json=json,
                headers=self._headers(),
                timeout=self._config.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed without a response: %s (%s)", method, url, e, type(e).__name__)
            raise NetworkError(f"No response from {method} {path}: {e}", original=e) from e

        payload = _decode_body(response)
        status = response.status_code
        if status >= 400:
            logger.warning("%s %s returned HTTP %s", method, url, status)
            raise HttpStatusError(
                f"{method} {path} returned HTTP {status}",
                status=status,
                payload=payload,
                response=response,
            )
        raise_for_application_error(payload, response)
        return payload

    def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
