"""Document storage backends behind the repository layer.

Documents are JSON-compatible dicts carrying their own ``id``. A collection is a
logical namespace (one per entity type). Both backends keep insertion order for
unfiltered and filtered listings.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from threading import Lock
from typing import Any, Mapping

from psycopg.rows import tuple_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from .config import Settings

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DocumentStore(ABC):
    """Collection-oriented persistence used by every repository."""

    @abstractmethod
    def insert(self, collection: str, document: Mapping[str, Any]) -> None:
        """Store a new document under ``document["id"]``."""

    @abstractmethod
    def get(self, collection: str, document_id: str) -> Document | None:
        """Return the document with the given id or ``None``."""

    @abstractmethod
    def find(
        self,
        collection: str,
        *,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Document]:
        """Return documents whose top-level fields equal ``filters``, paged by limit/offset."""

    @abstractmethod
    def update(self, collection: str, document_id: str, fields: Mapping[str, Any]) -> bool:
        """Merge ``fields`` over the stored document; ``False`` when it does not exist."""

    @abstractmethod
    def delete(self, collection: str, document_id: str) -> bool:
        """Remove a document; ``False`` when it does not exist."""

    @abstractmethod
    def ping(self) -> None:
        """Raise when the backend is unreachable."""

    def close(self) -> None:
        """Release backend resources."""


class InMemoryDocumentStore(DocumentStore):
    """Process-local store: one dict per collection, wiped on restart.

    Handlers run in a thread pool, so each collection map has its own lock. The
    lock covers single operations only, never a repository read-modify-write.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self._locks: dict[str, Lock] = {}
        self._registry_lock = Lock()

    def _collection(self, name: str) -> tuple[dict[str, Document], Lock]:
        with self._registry_lock:
            if name not in self._collections:
                self._collections[name] = {}
                self._locks[name] = Lock()
            return self._collections[name], self._locks[name]

    def insert(self, collection: str, document: Mapping[str, Any]) -> None:
        documents, lock = self._collection(collection)
        with lock:
            documents[document["id"]] = copy.deepcopy(dict(document))

    def get(self, collection: str, document_id: str) -> Document | None:
        documents, lock = self._collection(collection)
        with lock:
            document = documents.get(document_id)
            return copy.deepcopy(document) if document is not None else None

    def find(
        self,
        collection: str,
        *,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Document]:
        documents, lock = self._collection(collection)
        with lock:
            matches = [
                copy.deepcopy(document)
                for document in documents.values()
                if _matches(document, filters)
            ]
        end = None if limit is None else offset + limit
        return matches[offset:end]

    def update(self, collection: str, document_id: str, fields: Mapping[str, Any]) -> bool:
        documents, lock = self._collection(collection)
        with lock:
            document = documents.get(document_id)
            if document is None:
                return False
            document.update(copy.deepcopy(dict(fields)))
            return True

    def delete(self, collection: str, document_id: str) -> bool:
        documents, lock = self._collection(collection)
        with lock:
            return documents.pop(document_id, None) is not None

    def ping(self) -> None:
        return None

    def clear(self, collection: str | None = None) -> None:
        """Drop one collection, or every collection when none is named."""
        with self._registry_lock:
            if collection is None:
                self._collections.clear()
                self._locks.clear()
            else:
                self._collections.pop(collection, None)
                self._locks.pop(collection, None)


def _matches(document: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
    if not filters:
        return True
    return all(document.get(key) == value for key, value in filters.items())


class PostgresDocumentStore(DocumentStore):
    """Durable document store on a single Postgres JSONB table."""

    _SCHEMA_SQL = """
        CREATE TABLE IF NOT EXISTS documents (
            seq BIGSERIAL NOT NULL,
            collection TEXT NOT NULL,
            id TEXT NOT NULL,
            body JSONB NOT NULL,
            PRIMARY KEY (collection, id)
        )
    """
    _INDEX_SQL = "CREATE INDEX IF NOT EXISTS documents_collection_seq_idx ON documents (collection, seq)"

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def ensure_schema(self) -> None:
        """Create the documents table when it is missing."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(self._SCHEMA_SQL)
                cur.execute(self._INDEX_SQL)
            conn.commit()

    def insert(self, collection: str, document: Mapping[str, Any]) -> None:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "INSERT INTO documents (collection, id, body) VALUES (%s, %s, %s)",
                    (collection, document["id"], Jsonb(dict(document))),
                )
            conn.commit()

    def get(self, collection: str, document_id: str) -> Document | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    "SELECT body FROM documents WHERE collection = %s AND id = %s",
                    (collection, document_id),
                )
                row = cur.fetchone()
        if not row:
            return None
        return row[0]

    def find(
        self,
        collection: str,
        *,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Document]:
        clauses = ["collection = %s"]
        params: list[Any] = [collection]
        if filters:
            clauses.append("body @> %s")
            params.append(Jsonb(dict(filters)))
        where_sql = " AND ".join(clauses)
        # LIMIT NULL means no limit in Postgres
        query = f"""
            SELECT body
            FROM documents
            WHERE {where_sql}
            ORDER BY seq
            LIMIT %s OFFSET %s
        """
        params.extend([limit, offset])

        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                return [row[0] for row in cur.fetchall()]

    def update(self, collection: str, document_id: str, fields: Mapping[str, Any]) -> bool:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE documents SET body = body || %s WHERE collection = %s AND id = %s",
                    (Jsonb(dict(fields)), collection, document_id),
                )
                updated = cur.rowcount > 0
            conn.commit()
        return updated

    def delete(self, collection: str, document_id: str) -> bool:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM documents WHERE collection = %s AND id = %s",
                    (collection, document_id),
                )
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    def ping(self) -> None:
        with self._pool.connection() as conn:
            conn.execute("SELECT 1")

    def close(self) -> None:
        self._pool.close()


def build_store(settings: Settings) -> DocumentStore:
    """Instantiate the storage backend selected by ``STORAGE_BACKEND``."""
    if settings.storage_backend == "memory":
        logger.info("storage configured for in-memory backend")
        return InMemoryDocumentStore()
    if settings.storage_backend != "database":
        raise ValueError(f"unknown storage backend: {settings.storage_backend!r}")

    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    store = PostgresDocumentStore(pool)
    store.ensure_schema()
    logger.info("storage configured for postgres document backend")
    return store
