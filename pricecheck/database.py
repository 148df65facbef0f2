"""SQLite database handle with the schema applied on open."""

import os
import sqlite3

from .schema import initialize


class Database:
    """An open SQLite connection whose schema has been initialised."""

    def __init__(self, conn):
        self.conn = conn

    @classmethod
    def open(cls, path):
        """Open or create the database file at ``path``."""
        conn = sqlite3.connect(
            os.fspath(path), isolation_level=None, check_same_thread=False
        )
        try:
            initialize(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return cls(conn)

    @classmethod
    def in_memory(cls):
        """Create a fresh in-memory database."""
        return cls.open(":memory:")

    def close(self):
        """Close the underlying connection."""
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False