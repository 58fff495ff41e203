"""
Tests for environment configuration and client composition.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from union_loans.factory import build_client
from union_loans.infrastructure.adapters.erp import ErpRpcAdapter
from union_loans.infrastructure.adapters.rest import RestAdapter
from union_loans.utils.config import BackendConfig, load_backend_config

ENV_KEYS = [
    "UNION_LOANS_BACKEND",
    "UNION_LOANS_BASE_URL",
    "UNION_LOANS_API_PREFIX",
    "UNION_LOANS_ERP_DB",
    "UNION_LOANS_SESSION_FILE",
    "UNION_LOANS_SESSION_TTL_HOURS",
    "UNION_LOANS_TIMEOUT",
    "UNION_LOANS_CURRENCY_SYMBOL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    with patch("union_loans.utils.config.load_config"):
        yield


def test_defaults() -> None:
    config = load_backend_config()
    assert config.backend == "rest"
    assert config.base_url == "http://localhost:8069"
    assert config.api_prefix == "/api"
    assert config.erp_db == "ranchi"
    assert config.session_ttl_hours == 24
    assert config.timeout is None
    assert config.currency_symbol == "₦"
    assert config.session_file.name == "session.json"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("UNION_LOANS_BACKEND", "ERP")
    monkeypatch.setenv("UNION_LOANS_BASE_URL", "https://erp.example.com")
    monkeypatch.setenv("UNION_LOANS_API_PREFIX", "v2/")
    monkeypatch.setenv("UNION_LOANS_SESSION_FILE", str(tmp_path / "s.json"))
    monkeypatch.setenv("UNION_LOANS_SESSION_TTL_HOURS", "not-a-number")
    monkeypatch.setenv("UNION_LOANS_TIMEOUT", "7.5")

    config = load_backend_config()
    assert config.backend == "erp"
    assert config.base_url == "https://erp.example.com"
    assert config.api_prefix == "/v2"
    assert config.session_file == tmp_path / "s.json"
    assert config.session_ttl_hours == 24
    assert config.timeout == 7.5


def test_invalid_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UNION_LOANS_BACKEND", "graphql")
    with pytest.raises(ValueError, match="UNION_LOANS_BACKEND"):
        load_backend_config()


def test_url_join() -> None:
    config = BackendConfig(base_url="http://host:8069/")
    assert config.url("/api/unions") == "http://host:8069/api/unions"
    assert config.url("web/session/destroy") == "http://host:8069/web/session/destroy"


@pytest.mark.parametrize("backend,expected", [("rest", RestAdapter), ("erp", ErpRpcAdapter)])
def test_build_client_selects_adapter(tmp_path: Path, backend: str, expected: type) -> None:
    client = build_client(BackendConfig(backend=backend, session_file=tmp_path / "session.json"))

    assert isinstance(client.adapter, expected)
    assert client.data.adapter is client.adapter
    assert client.transport.config is client.config
    assert client.session_store.path == tmp_path / "session.json"
    assert not client.auth.is_authenticated()


def test_build_client_unknown_backend(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        build_client(BackendConfig(backend="soap", session_file=tmp_path / "session.json"))


def test_session_file_default_matches_environment_default() -> None:
    assert BackendConfig().session_file == load_backend_config().session_file
    assert BackendConfig().session_file.is_absolute()
