"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (HTTP actor, identity
    provider, the in-memory backend double) and the gateway that decodes
    backend replies into domain types.

Dependencies:
    ``http_client`` and ``backend_rest`` depend on ``requests``; the rest
    depend on domain types only.

Call context:
    Imported by ``notedapp.app.controller`` for runtime wiring and by tests.
"""
