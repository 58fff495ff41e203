"""Backend integrations behind the `BackendAdapter` contract."""
