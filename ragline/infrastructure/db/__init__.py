"""Database infrastructure (async PostgreSQL pool)."""

from .pool import close_pool, ensure_schema, get_pool, init_pool

__all__ = ["close_pool", "ensure_schema", "get_pool", "init_pool"]
