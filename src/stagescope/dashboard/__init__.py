"""Stagescope dashboard: REST and SSE endpoints emitting chart payloads."""
