"""
Test doubles for asyncpg pools and connections
"""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import asyncpg


class FakeTransaction:
    """Async context manager mimicking Connection.transaction()"""

    def __init__(self, conn):
        self.conn = conn
        self.snapshot = None

    async def __aenter__(self):
        self.conn.transactions += 1
        snapshot = getattr(self.conn, "snapshot", None)
        self.snapshot = snapshot() if snapshot else None
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.conn.rollbacks += 1
            restore = getattr(self.conn, "restore", None)
            if restore and self.snapshot is not None:
                restore(self.snapshot)
        return False


class FakeAcquire:
    def __init__(self, pool):
        self.pool = pool

    async def __aenter__(self):
        if self.pool.acquire_error is not None:
            raise self.pool.acquire_error
        self.pool.acquired += 1
        return self.pool.conn

    async def __aexit__(self, exc_type, exc, tb):
        self.pool.released += 1
        return False


class FakePool:
    """Pool whose acquire() hands out a single connection and counts releases"""

    def __init__(self, conn=None, acquire_error: Optional[BaseException] = None):
        self.conn = conn if conn is not None else make_connection()
        self.acquire_error = acquire_error
        self.acquired = 0
        self.released = 0
        self.timeouts: List[Optional[float]] = []
        self.closed = False

    def acquire(self, timeout: Optional[float] = None):
        self.timeouts.append(timeout)
        return FakeAcquire(self)

    async def close(self):
        self.closed = True


def make_connection(**methods: Any) -> MagicMock:
    """Connection with AsyncMock statement methods, overridable per test"""
    conn = MagicMock()
    conn.transactions = 0
    conn.rollbacks = 0
    conn.fetchrow = methods.get("fetchrow", AsyncMock(return_value=None))
    conn.fetch = methods.get("fetch", AsyncMock(return_value=[]))
    conn.fetchval = methods.get("fetchval", AsyncMock(return_value=1))
    conn.execute = methods.get("execute", AsyncMock(return_value="OK"))
    conn.transaction = MagicMock(side_effect=lambda: FakeTransaction(conn))
    return conn


def unique_violation(constraint: Optional[str] = None) -> asyncpg.UniqueViolationError:
    exc = asyncpg.UniqueViolationError("duplicate key value violates unique constraint")
    exc.constraint_name = constraint
    return exc


class FakeMigrationConnection:
    """
    Connection that understands the migrator's ledger statements and records
    every other statement it is asked to run.
    """

    def __init__(self, fail_on: Optional[str] = None):
        self.ledger: Dict[int, str] = {}
        self.has_ledger = False
        self.statements: List[str] = []
        self.locks: List[str] = []
        self.fail_on = fail_on
        self.transactions = 0
        self.rollbacks = 0

    def snapshot(self):
        return dict(self.ledger), list(self.statements)

    def restore(self, snapshot):
        self.ledger, self.statements = dict(snapshot[0]), list(snapshot[1])

    def transaction(self):
        return FakeTransaction(self)

    async def execute(self, query: str, *args):
        statement = " ".join(query.split())
        if statement.startswith("CREATE TABLE IF NOT EXISTS schema_migrations"):
            self.has_ledger = True
            return "CREATE TABLE"
        if statement.startswith("SELECT pg_advisory_lock"):
            self.locks.append("lock")
            return "SELECT 1"
        if statement.startswith("SELECT pg_advisory_unlock"):
            self.locks.append("unlock")
            return "SELECT 1"
        if statement.startswith("INSERT INTO schema_migrations"):
            self.ledger[args[0]] = args[1]
            return "INSERT 0 1"
        if statement.startswith("DELETE FROM schema_migrations"):
            self.ledger.pop(args[0], None)
            return "DELETE 1"
        if self.fail_on and self.fail_on in statement:
            raise asyncpg.PostgresError(f"cannot run {self.fail_on}")
        self.statements.append(statement)
        return "OK"

    async def fetchval(self, query: str, *args):
        if "to_regclass" in query:
            return "schema_migrations" if self.has_ledger else None
        raise AssertionError(f"unexpected fetchval: {query}")

    async def fetch(self, query: str, *args):
        return [{"version": v, "name": n} for v, n in sorted(self.ledger.items())]

    def executed(self, prefix: str) -> List[str]:
        return [s for s in self.statements if s.startswith(prefix)]
