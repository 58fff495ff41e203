"""Infrastructure layer: HTTP transport, session storage and backend adapters."""
