"""Login/logout against the active backend, persisting the session locally."""

from __future__ import annotations

from typing import Optional

from union_loans.domains.models import SessionDescriptor
from union_loans.infrastructure.adapters.base import BackendAdapter
from union_loans.infrastructure.errors import BackendError
from union_loans.infrastructure.session import SessionStore
from union_loans.services.data_access import DataAccess
from union_loans.utils.logger import get_logger

logger = get_logger()


class AuthService:
    def __init__(
        self,
        adapter: BackendAdapter,
        store: SessionStore,
        data: Optional[DataAccess] = None,
    ) -> None:
        self._adapter = adapter
        self._store = store
        self._data = data

    def login(self, username: str, password: str) -> SessionDescriptor:
        """
        Authenticate and persist ``{user, expiresAt}``.

        Raises:
            AuthenticationError: Credentials rejected.
            BackendError: The backend could not be reached.
        """
        session = self._adapter.login(username, password)
        self._store.save(session)
        return session

    def logout(self) -> None:
        """End the server session. Local state is cleared even when the server call fails."""
        try:
            self._adapter.logout()
        except BackendError as e:
            logger.warning("Logout error (clearing local session anyway): %s", e)
        finally:
            self._store.clear()
            if self._data is not None:
                self._data.clear_cache()

    def current_session(self) -> Optional[SessionDescriptor]:
        return self._store.current()

    def is_authenticated(self) -> bool:
        return self.current_session() is not None
