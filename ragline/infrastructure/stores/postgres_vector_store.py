"""
Name: PostgreSQL Vector Store (pgvector)

Responsibilities:
  - Implement VectorStore over PostgreSQL + pgvector
  - Cosine similarity search (1 - (embedding <=> query))
  - Upsert via ON CONFLICT, delete/count by id

Collaborators:
  - infrastructure.db.pool: AsyncConnectionPool
  - pgvector: vector type (registered per connection)
  - domain.entities: Document, ScoredDocument

Constraints:
  - Database errors propagate; the pipeline guard maps them to
    RetrievalUnavailableError / StoreUnavailableError
  - Ordering: score DESC, id ASC
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from ...domain.entities import Document, DocumentId, ScoredDocument
from ...logger import logger
from ..db.pool import DOCUMENTS_TABLE, checked_table_name


class PostgresVectorStore:
    """
    R: PostgreSQL implementation of VectorStore.
    """

    def __init__(
        self,
        pool: Optional[AsyncConnectionPool] = None,
        *,
        table: str = DOCUMENTS_TABLE,
    ):
        """
        Args:
            pool: Connection pool (if None, uses global pool)
            table: Documents table (created by ensure_schema)
        """
        self._pool = pool
        self._table = checked_table_name(table)

    def _get_pool(self) -> AsyncConnectionPool:
        """R: Get pool, falling back to global if not injected."""
        if self._pool is not None:
            return self._pool

        from ..db.pool import get_pool

        return get_pool()

    async def search(self, vector: List[float], k: int) -> List[ScoredDocument]:
        query = np.asarray(vector, dtype=np.float32)
        async with self._get_pool().connection() as conn:
            cur = await conn.execute(
                f"""
                SELECT id, text, metadata, embedding,
                  (1 - (embedding <=> %s)) AS score
                FROM {self._table}
                ORDER BY embedding <=> %s, id
                LIMIT %s
                """,
                (query, query, k),
            )
            rows = await cur.fetchall()

        logger.info(f"PostgresVectorStore: Found {len(rows)} similar documents")
        return [
            ScoredDocument(
                document=Document(
                    id=row[0],
                    text=row[1],
                    metadata=row[2] or {},
                    embedding=tuple(float(x) for x in row[3]),
                ),
                score=float(row[4]),
            )
            for row in rows
        ]

    async def upsert(self, document: Document) -> None:
        async with self._get_pool().connection() as conn:
            await conn.execute(
                f"""
                INSERT INTO {self._table} (id, text, metadata, embedding)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (id) DO UPDATE
                SET text = EXCLUDED.text,
                    metadata = EXCLUDED.metadata,
                    embedding = EXCLUDED.embedding
                """,
                (
                    document.id,
                    document.text,
                    Jsonb(document.metadata),
                    np.asarray(document.embedding, dtype=np.float32),
                ),
            )
        logger.info(f"PostgresVectorStore: Document saved: {document.id}")

    async def delete(self, document_id: DocumentId) -> bool:
        async with self._get_pool().connection() as conn:
            cur = await conn.execute(
                f"DELETE FROM {self._table} WHERE id = %s",
                (document_id,),
            )
            return cur.rowcount > 0

    async def count(self) -> int:
        async with self._get_pool().connection() as conn:
            cur = await conn.execute(f"SELECT count(*) FROM {self._table}")
            row = await cur.fetchone()
        return int(row[0]) if row else 0
