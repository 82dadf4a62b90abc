"""
Slot storage for user-data records.

Both backends provide the atomic compare-and-commit the core relies on:

    read(address) -> bytes | None
    commit(address, expectedPrior, newBytes) -> True (committed) | False (conflict)

A commit only lands when the slot still holds exactly expectedPrior (None meaning
the slot must not exist). The core never locks; racing writers on one address
are resolved here.

Schema (SqliteStorage):
- slots: address BLOB PK, data BLOB, updatedAt TEXT
"""

import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from vaultkit.logging import getLogger


class StorageError(Exception):
    """Storage backend failure (not a conflict)"""
    pass


class Storage(ABC):
    """Abstract slot store"""

    @abstractmethod
    def read(self, address: bytes) -> Optional[bytes]:
        """Slot bytes, or None when the slot is Absent"""
        pass

    @abstractmethod
    def commit(self, address: bytes, expectedPrior: Optional[bytes], newBytes: bytes) -> bool:
        """Atomically replace the slot if it still equals expectedPrior"""
        pass

    def close(self):
        pass


class MemoryStorage(Storage):
    """In-process store; one lock serializes commits."""

    def __init__(self):
        self.log = getLogger()
        self._slots: Dict[bytes, bytes] = {}
        self._lock = threading.Lock()

    def read(self, address: bytes) -> Optional[bytes]:
        with self._lock:
            return self._slots.get(bytes(address))

    def commit(self, address: bytes, expectedPrior: Optional[bytes], newBytes: bytes) -> bool:
        address = bytes(address)
        with self._lock:
            if self._slots.get(address) != expectedPrior:
                self.log.debug("Commit conflict", address=address.hex())
                return False
            self._slots[address] = bytes(newBytes)
            return True

    def __len__(self):
        return len(self._slots)


class SqliteStorage(Storage):
    """
    SQLite slot store.

    Each commit runs in one BEGIN IMMEDIATE transaction so the compare and the
    write cannot interleave with another connection's commit.
    """

    def __init__(self, dbPath: str):
        """
        Args:
            dbPath: Path to SQLite database file (':memory:' for a private in-memory DB)
        """
        self.log = getLogger()
        self.dbPath = dbPath
        if dbPath != ':memory:':
            Path(dbPath).parent.mkdir(parents=True, exist_ok=True)
        self.conn: Optional[sqlite3.Connection] = None
        self._writeLock = threading.Lock()
        self._connect()
        self._initSchema()

    def _connect(self):
        self.conn = sqlite3.connect(
            str(self.dbPath),
            check_same_thread=False,
            isolation_level=None,  # Explicit BEGIN/COMMIT below
            timeout=30.0
        )
        if self.dbPath != ':memory:':
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")

    def _initSchema(self):
        with self._writeLock:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS slots (
                    address BLOB PRIMARY KEY,
                    data BLOB NOT NULL,
                    updatedAt TEXT NOT NULL
                )
            """)
        self.log.info("Slot store ready", dbPath=str(self.dbPath))

    def read(self, address: bytes) -> Optional[bytes]:
        address = bytes(address)
        with self._writeLock:
            try:
                row = self.conn.execute(
                    "SELECT data FROM slots WHERE address = ?", (address,)
                ).fetchone()
            except sqlite3.Error as exc:
                self.log.error("Read failed", address=address.hex(), errorMsg=str(exc))
                raise StorageError(f"read failed: {exc}") from exc
        return bytes(row[0]) if row else None

    def commit(self, address: bytes, expectedPrior: Optional[bytes], newBytes: bytes) -> bool:
        address = bytes(address)
        now = datetime.now(timezone.utc).isoformat()

        with self._writeLock:
            try:
                self.conn.execute("BEGIN IMMEDIATE")
                row = self.conn.execute(
                    "SELECT data FROM slots WHERE address = ?", (address,)
                ).fetchone()
                stored = bytes(row[0]) if row else None

                if stored != expectedPrior:
                    self.conn.execute("ROLLBACK")
                    self.log.debug("Commit conflict", address=address.hex())
                    return False

                if row is None:
                    self.conn.execute(
                        "INSERT INTO slots (address, data, updatedAt) VALUES (?, ?, ?)",
                        (address, bytes(newBytes), now)
                    )
                else:
                    self.conn.execute(
                        "UPDATE slots SET data = ?, updatedAt = ? WHERE address = ?",
                        (bytes(newBytes), now, address)
                    )
                self.conn.execute("COMMIT")
                return True
            except sqlite3.Error as exc:
                if self.conn.in_transaction:
                    self.conn.execute("ROLLBACK")
                self.log.error("Commit failed", address=address.hex(), errorMsg=str(exc))
                raise StorageError(f"commit failed: {exc}") from exc

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None


def createStorage(storageConfig: dict) -> Storage:
    """Build the backend named by config['storage']"""
    backend = storageConfig.get('backend', 'sqlite')
    if backend == 'memory':
        return MemoryStorage()
    if backend == 'sqlite':
        return SqliteStorage(storageConfig['dbPath'])
    raise ValueError(f"Unknown storage backend: {backend}")
