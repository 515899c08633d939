"""
Name: PostgreSQL Connection Pool (async)

Responsibilities:
  - Manage async connection pool lifecycle (init, get, close)
  - Register pgvector types on every pooled connection
  - Create the vector extension and documents table on startup

Collaborators:
  - psycopg_pool: AsyncConnectionPool
  - pgvector: Vector type registration
  - main.py lifespan: calls ensure_schema/init_pool/close_pool

Constraints:
  - Singleton pattern (one pool per process)
  - Must init before use, close on shutdown
  - The vector extension must exist before register_vector_async runs
"""

import asyncio
import re
from typing import Optional

import psycopg
from pgvector.psycopg import register_vector_async
from psycopg_pool import AsyncConnectionPool

from ...logger import logger

DOCUMENTS_TABLE = "documents"

_TABLE_NAME = re.compile(r"[a-z_][a-z0-9_]{0,62}")

# R: Singleton pool instance
_pool: Optional[AsyncConnectionPool] = None
_pool_lock = asyncio.Lock()


async def _configure_connection(conn: psycopg.AsyncConnection) -> None:
    """R: Register vector type for this connection."""
    await register_vector_async(conn)


def checked_table_name(table: str) -> str:
    """R: Table names are interpolated into SQL, so only plain identifiers pass."""
    if not _TABLE_NAME.fullmatch(table):
        raise ValueError(f"Invalid table name: {table!r}")
    return table


async def ensure_schema(
    database_url: str, embedding_dimension: int, *, table: str = DOCUMENTS_TABLE
) -> None:
    """
    R: Create the pgvector extension and documents table if missing.
    """
    table = checked_table_name(table)
    async with await psycopg.AsyncConnection.connect(
        database_url, autocommit=True
    ) as conn:
        await conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id TEXT PRIMARY KEY,
                text TEXT NOT NULL,
                metadata JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                embedding vector({int(embedding_dimension)}) NOT NULL,
                created_at TIMESTAMPTZ NOT NULL DEFAULT now()
            )
            """
        )
    logger.info(
        "Database schema ready",
        extra={"table": table, "embedding_dimension": embedding_dimension},
    )


async def init_pool(
    database_url: str, min_size: int, max_size: int
) -> AsyncConnectionPool:
    """
    R: Initialize the connection pool.

    Raises:
        RuntimeError: If pool already initialized
    """
    global _pool

    async with _pool_lock:
        if _pool is not None:
            raise RuntimeError("Connection pool already initialized")

        logger.info(
            "Initializing connection pool",
            extra={"min_size": min_size, "max_size": max_size},
        )
        pool = AsyncConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_configure_connection,
            open=False,
        )
        await pool.open()
        _pool = pool
        logger.info("Connection pool initialized")
        return _pool


def get_pool() -> AsyncConnectionPool:
    """
    R: Get the connection pool singleton.

    Raises:
        RuntimeError: If pool not initialized
    """
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    return _pool


async def close_pool() -> None:
    """
    R: Close the connection pool.

    Safe to call even if pool not initialized.
    """
    global _pool

    async with _pool_lock:
        if _pool is not None:
            logger.info("Closing connection pool")
            await _pool.close()
            _pool = None
            logger.info("Connection pool closed")
