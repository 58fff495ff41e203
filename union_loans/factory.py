"""
Composition root: picks the backend adapter from configuration and wires the
transport, session store, facade and auth service together.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from union_loans.infrastructure.adapters.base import BackendAdapter
from union_loans.infrastructure.adapters.erp import ErpRpcAdapter
from union_loans.infrastructure.adapters.rest import RestAdapter
from union_loans.infrastructure.http.transport import TransportClient
from union_loans.infrastructure.session import SessionStore
from union_loans.services.auth import AuthService
from union_loans.services.data_access import DataAccess
from union_loans.utils.config import BACKEND_ERP, BACKEND_REST, BackendConfig, load_backend_config
from union_loans.utils.logger import get_logger

logger = get_logger()

_ADAPTERS = {
    BACKEND_REST: RestAdapter,
    BACKEND_ERP: ErpRpcAdapter,
}


def build_adapter(config: BackendConfig, transport: TransportClient) -> BackendAdapter:
    try:
        adapter_cls = _ADAPTERS[config.backend]
    except KeyError:
        raise ValueError(f"Unknown backend {config.backend!r}") from None
    return adapter_cls(transport)


@dataclass
class UnionLoansClient:
    """Everything a caller needs, built once per process."""

    config: BackendConfig
    session_store: SessionStore
    transport: TransportClient
    adapter: BackendAdapter
    data: DataAccess
    auth: AuthService


def build_client(config: Optional[BackendConfig] = None) -> UnionLoansClient:
    """Build a client from ``config`` (or from the environment when omitted)."""
    config = config or load_backend_config()
    store = SessionStore(config.session_file, ttl_hours=config.session_ttl_hours)
    transport = TransportClient(config, store)
    adapter = build_adapter(config, transport)
    data = DataAccess(adapter)
    auth = AuthService(adapter, store, data)
    logger.info("Using %s backend at %s", adapter.name, config.base_url)
    return UnionLoansClient(
        config=config,
        session_store=store,
        transport=transport,
        adapter=adapter,
        data=data,
        auth=auth,
    )
