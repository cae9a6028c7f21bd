"""
Document store backends for Gabarito.

Two interchangeable backends expose the same small surface (insert, find,
count, update, delete_all):

- SupabaseStore: the production store, reached through a lazily created
  Supabase client.
- MemoryStore: a process-local store for local development and tests.

Filters:
    where     {column: value} equality, or {column: [values]} membership
    search    {column: text} case-insensitive substring match
    contains  {column: value} array column holds value
"""
import copy
import logging
import threading

from .errors import StorageError

logger = logging.getLogger(__name__)

TABLES = (
    "identities",
    "assessments",
    "answer_keys",
    "student_answers",
    "forms",
    "questions",
)


class SupabaseStore:
    """Store backed by Supabase (PostgREST) tables."""

    def __init__(self, url, key, client=None):
        self.url = url
        self.key = key
        self._client = client

    @property
    def client(self):
        """Get or create the Supabase client."""
        if self._client is None:
            from supabase import create_client
            if not self.url or not self.key:
                raise StorageError("Supabase credentials not configured. Check SUPABASE_URL and SUPABASE_SERVICE_KEY in .env")
            self._client = create_client(self.url, self.key)
        return self._client

    def _execute(self, table, query):
        try:
            return query.execute()
        except StorageError:
            raise
        except Exception as e:
            logger.error("Storage call on %s failed: %s", table, str(e))
            raise StorageError() from e

    @staticmethod
    def _filter(query, where=None, search=None, contains=None):
        for column, value in (where or {}).items():
            if isinstance(value, (list, tuple, set)):
                query = query.in_(column, list(value))
            else:
                query = query.eq(column, value)
        for column, text in (search or {}).items():
            query = query.ilike(column, f"%{text}%")
        for column, value in (contains or {}).items():
            query = query.contains(column, [value])
        return query

    def insert(self, table, doc):
        result = self._execute(table, self.client.table(table).insert(doc))
        if not result.data:
            raise StorageError()
        return result.data[0]

    def insert_many(self, table, docs):
        if not docs:
            return []
        result = self._execute(table, self.client.table(table).insert(list(docs)))
        return result.data or []

    def find(self, table, where=None, search=None, contains=None,
             order_by=None, desc=False, limit=None, offset=0):
        query = self._filter(self.client.table(table).select("*"), where, search, contains)
        if order_by:
            query = query.order(order_by, desc=desc)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)
        return self._execute(table, query).data or []

    def find_one(self, table, where):
        rows = self.find(table, where=where, limit=1)
        return rows[0] if rows else None

    def count(self, table, where=None, search=None, contains=None):
        query = self._filter(self.client.table(table).select("id", count="exact"), where, search, contains)
        result = self._execute(table, query)
        return result.count or 0

    def update(self, table, where, changes):
        query = self._filter(self.client.table(table).update(changes), where)
        return self._execute(table, query).data or []

    def delete_all(self, table):
        # PostgREST refuses unfiltered deletes
        result = self._execute(table, self.client.table(table).delete().neq("id", ""))
        return len(result.data or [])


class MemoryStore:
    """Thread-safe in-process store. Rows keep insertion order as a tiebreaker."""

    def __init__(self):
        self._lock = threading.Lock()
        self._rows = {name: [] for name in TABLES}
        self._seq = 0

    def _table(self, table):
        if table not in self._rows:
            raise StorageError(f"Unknown table: {table}")
        return self._rows[table]

    @staticmethod
    def _matches(doc, where=None, search=None, contains=None):
        for column, value in (where or {}).items():
            if isinstance(value, (list, tuple, set)):
                if doc.get(column) not in value:
                    return False
            elif doc.get(column) != value:
                return False
        for column, text in (search or {}).items():
            if str(text).lower() not in str(doc.get(column) or "").lower():
                return False
        for column, value in (contains or {}).items():
            if value not in (doc.get(column) or []):
                return False
        return True

    def insert(self, table, doc):
        with self._lock:
            rows = self._table(table)
            self._seq += 1
            rows.append((self._seq, copy.deepcopy(doc)))
            return copy.deepcopy(doc)

    def insert_many(self, table, docs):
        return [self.insert(table, doc) for doc in docs]

    def find(self, table, where=None, search=None, contains=None,
             order_by=None, desc=False, limit=None, offset=0):
        with self._lock:
            rows = [(seq, doc) for seq, doc in self._table(table)
                    if self._matches(doc, where, search, contains)]
        if order_by:
            rows.sort(key=lambda r: (r[1].get(order_by) is not None, r[1].get(order_by) or "", r[0]),
                      reverse=desc)
        docs = [copy.deepcopy(doc) for _, doc in rows]
        if limit is not None:
            return docs[offset:offset + limit]
        return docs[offset:]

    def find_one(self, table, where):
        rows = self.find(table, where=where, limit=1)
        return rows[0] if rows else None

    def count(self, table, where=None, search=None, contains=None):
        return len(self.find(table, where=where, search=search, contains=contains))

    def update(self, table, where, changes):
        updated = []
        with self._lock:
            for _, doc in self._table(table):
                if self._matches(doc, where):
                    doc.update(copy.deepcopy(changes))
                    updated.append(copy.deepcopy(doc))
        return updated

    def delete_all(self, table):
        with self._lock:
            rows = self._table(table)
            removed = len(rows)
            rows.clear()
        return removed


def create_store(cfg):
    """Build the store selected by ``cfg.storage_backend``."""
    backend = (cfg.storage_backend or "").lower()
    if backend == "memory":
        logger.info("Using in-memory document store")
        return MemoryStore()
    if backend == "supabase":
        return SupabaseStore(cfg.supabase_url, cfg.supabase_service_key)
    raise ValueError(f"Unknown storage backend: {cfg.storage_backend}")
