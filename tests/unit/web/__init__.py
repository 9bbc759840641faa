"""Unit tests for tech-pack web route modules.

Routers are mounted on a bare FastAPI app; ``get_session`` and the
repository/service calls are patched, so no database is needed.
"""
