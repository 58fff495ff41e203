"""Load and validate environment variables. Uses python-dotenv.

This module is intentionally thin and side-effect free except for loading `.env`.
Callers should build a `BackendConfig` once with `load_backend_config()` and pass
it to the transport and adapters, rather than reading `os.environ` directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
import os

BACKEND_REST = "rest"
BACKEND_ERP = "erp"
BACKENDS = (BACKEND_REST, BACKEND_ERP)


def _project_root() -> Path:
    """Resolve project root (the directory holding the `union_loans` package)."""
    return Path(__file__).resolve().parent.parent.parent


def default_session_file() -> Path:
    """Session record location when none is configured: <project>/data/session.json."""
    return _project_root() / "data" / "session.json"


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Uses override=True to ensure .env values take precedence over existing env vars.
    """
    root = _project_root()
    env_path = root / ".env"
    load_dotenv(env_path, override=True)


def get_required(key: str) -> str:
    """
    Get required env var. Raises if missing or empty.

    Raises:
        ValueError: If key is missing or empty after trimming.
    """
    load_config()
    val = os.getenv(key, "").strip()
    if not val:
        raise ValueError(
            f"Missing required environment variable: {key}. "
            "Set it in .env or export it."
        )
    return val


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_int(key: str, default: int) -> int:
    """Get optional env var as int; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_optional_float(key: str, default: Optional[float] = None) -> Optional[float]:
    """Get optional env var as float; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class BackendConfig:
    """Everything the transport and adapters need, resolved once at startup."""

    backend: str = BACKEND_REST
    base_url: str = "http://localhost:8069"
    api_prefix: str = "/api"
    erp_db: str = "ranchi"
    session_file: Path = field(default_factory=default_session_file)
    session_ttl_hours: int = 24
    timeout: Optional[float] = None
    currency_symbol: str = "₦"

    def url(self, path: str) -> str:
        """Join a route path onto the base URL."""
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")


# --- Public config accessors ---

def backend_kind() -> str:
    """Optional: which backend integration to build. Default rest."""
    kind = get_optional("UNION_LOANS_BACKEND", BACKEND_REST).lower()
    if kind not in BACKENDS:
        raise ValueError(
            f"Unsupported UNION_LOANS_BACKEND={kind!r}; expected one of {', '.join(BACKENDS)}."
        )
    return kind


def base_url() -> str:
    """Optional: backend origin. Default http://localhost:8069."""
    return get_optional("UNION_LOANS_BASE_URL", "http://localhost:8069")


def api_prefix() -> str:
    """Optional: REST base path. Default /api."""
    return "/" + get_optional("UNION_LOANS_API_PREFIX", "/api").strip("/")


def erp_db() -> str:
    """Optional: ERP database name used at login. Default ranchi."""
    return get_optional("UNION_LOANS_ERP_DB", "ranchi")


def session_file() -> Path:
    """Optional: where the session record is persisted. Default data/session.json."""
    raw = get_optional("UNION_LOANS_SESSION_FILE", "")
    if raw:
        return Path(raw).expanduser()
    return default_session_file()


def session_ttl_hours() -> int:
    """Optional: lifetime of a stored session. Default 24 hours."""
    return get_optional_int("UNION_LOANS_SESSION_TTL_HOURS", 24)


def request_timeout() -> Optional[float]:
    """Optional: per-request timeout in seconds. Unset means the requests default (none)."""
    return get_optional_float("UNION_LOANS_TIMEOUT", None)


def currency_symbol() -> str:
    """Optional: symbol used by format_currency. Default the naira sign."""
    return get_optional("UNION_LOANS_CURRENCY_SYMBOL", "₦")


def log_level() -> str:
    """Optional: level name for setup_logger (DEBUG, INFO, WARNING, ...). Default INFO."""
    return get_optional("UNION_LOANS_LOG_LEVEL", "INFO").upper()


def load_backend_config() -> BackendConfig:
    """Build the typed configuration from .env and the process environment."""
    return BackendConfig(
        backend=backend_kind(),
        base_url=base_url(),
        api_prefix=api_prefix(),
        erp_db=erp_db(),
        session_file=session_file(),
        session_ttl_hours=session_ttl_hours(),
        timeout=request_timeout(),
        currency_symbol=currency_symbol(),
    )


def project_root() -> Path:
    """Project root directory."""
    return _project_root()
