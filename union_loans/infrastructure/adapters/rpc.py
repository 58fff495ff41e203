"""
JSON-RPC 2.0 plumbing: the request envelope, error decoding, and the session
endpoints both adapters use for login and logout.
"""

from __future__ import annotations

from typing import Any, Mapping

from union_loans.domains.models import SessionDescriptor
from union_loans.infrastructure.errors import (
    ApplicationError,
    AuthenticationError,
    BackendError,
    PermissionDeniedError,
)
from union_loans.infrastructure.http.transport import TransportClient
from union_loans.utils.logger import get_logger

logger = get_logger()

AUTHENTICATE_PATH = "/web/session/authenticate"
DESTROY_PATH = "/web/session/destroy"


def rpc_envelope(params: Mapping[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "method": "call", "params": dict(params)}


def _rpc_error(error: Any) -> BackendError:
    if not isinstance(error, dict):
        return ApplicationError(str(error) or "Unknown RPC error", payload=error)
    data = error.get("data") if isinstance(error.get("data"), dict) else {}
    message = data.get("message") or error.get("message") or "Unknown RPC error"
    code = error.get("code")
    if code == 403 or str(data.get("name", "")).endswith("AccessError"):
        return PermissionDeniedError(message, status=403, payload=error)
    return ApplicationError(message, status=code if isinstance(code, int) else None, payload=error)


def rpc_call(transport: TransportClient, path: str, params: Mapping[str, Any]) -> Any:
    """
    POST a JSON-RPC call and return its ``result``.

    Raises:
        PermissionDeniedError: The server reported an access error.
        ApplicationError: Any other ``{"error": ...}`` envelope.
    """
    body = transport.post(path, json=rpc_envelope(params))
    if isinstance(body, dict) and body.get("error"):
        raise _rpc_error(body["error"])
    if isinstance(body, dict) and "result" in body:
        return body["result"]
    return body


def authenticate(transport: TransportClient, db: str, username: str, password: str) -> SessionDescriptor:
    """
    Open a server session.

    Raises:
        AuthenticationError: Credentials rejected or the server answered with an error.
    """
    try:
        result = rpc_call(
            transport,
            AUTHENTICATE_PATH,
            {"db": db, "login": username, "password": password},
        )
    except ApplicationError as e:
        logger.error("Login error: %s", e)
        raise AuthenticationError(str(e) or "Authentication failed", payload=e.payload, original=e) from e
    if not isinstance(result, dict) or not result.get("uid"):
        raise AuthenticationError("Authentication failed", payload=result)
    session = SessionDescriptor.from_dict(result)
    if not session.username:
        session = SessionDescriptor.from_dict({**result, "username": username})
    logger.info("Authenticated %s (uid=%s)", session.username, session.uid)
    return session


def destroy_session(transport: TransportClient) -> None:
    rpc_call(transport, DESTROY_PATH, {})
