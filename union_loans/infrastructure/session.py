"""
Persisted session record: ``{"user_session": {"user": {...}, "expiresAt": "<ISO-8601>"}}``.

The record is read on demand, and removed on logout or as soon as a read finds
that ``expiresAt`` has passed.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

from union_loans.domains.models import SessionDescriptor
from union_loans.utils.logger import get_logger

logger = get_logger()

SESSION_KEY = "user_session"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_expiry(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        out = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if out.tzinfo is None:
        out = out.replace(tzinfo=timezone.utc)
    return out


class SessionStore:
    """
    File-backed store for the single session record.

    Args:
        path: JSON file holding the record. Parent directories are created on save.
        ttl_hours: Lifetime given to newly saved sessions.
        clock: Returns the current aware datetime; injectable for tests.
    """

    def __init__(
        self,
        path: Path,
        ttl_hours: int = 24,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = Path(path)
        self._ttl = timedelta(hours=ttl_hours)
        self._clock = clock or _utcnow

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> dict[str, Any] | None:
        if not self._path.is_file():
            return None
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to parse stored session data at %s: %s", self._path, e)
            return None
        return data if isinstance(data, dict) else None

    def read(self) -> dict[str, Any] | None:
        """Return the raw ``{user, expiresAt}`` record, or None when absent or expired."""
        data = self._read_file()
        if not data:
            return None
        record = data.get(SESSION_KEY)
        if not isinstance(record, dict):
            return None
        expires_at = _parse_expiry(record.get("expiresAt"))
        if expires_at is None or expires_at <= self._clock():
            logger.info("Stored session expired; removing %s", self._path)
            self.clear()
            return None
        return record

    def current(self) -> SessionDescriptor | None:
        record = self.read()
        if not record or not isinstance(record.get("user"), dict):
            return None
        return SessionDescriptor.from_dict(record["user"])

    def session_id(self) -> str | None:
        """Session id of an unexpired stored session, if any."""
        user = self.current()
        if user and user.session_id:
            return user.session_id
        return None

    def save(self, user: SessionDescriptor, expires_at: datetime | None = None) -> dict[str, Any]:
        expires_at = expires_at or (self._clock() + self._ttl)
        record = {"user": user.to_dict(), "expiresAt": expires_at.isoformat()}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump({SESSION_KEY: record}, f, ensure_ascii=False, indent=2)
        return record

    def clear(self) -> None:
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
