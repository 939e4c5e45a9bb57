# backend/db/sqlite.py
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

REQUEST_LOGS_TABLE = "request_logs"

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {REQUEST_LOGS_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT NOT NULL,
    name_parameter TEXT NOT NULL,
    response_status INTEGER NOT NULL,
    response_text TEXT NOT NULL,
    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""

INDEXES = f"""
CREATE INDEX IF NOT EXISTS idx_{REQUEST_LOGS_TABLE}_timestamp ON {REQUEST_LOGS_TABLE} (timestamp);
"""

def get_connection(db_path: str) -> sqlite3.Connection:
    """
    Opens a connection in autocommit mode; callers that need a consistent
    multi-query view open a transaction explicitly.
    """
    conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn

def initialize_database(db_path: str) -> None:
    """
    Creates the request log table if it does not exist yet.
    """
    directory = os.path.dirname(os.path.abspath(db_path))
    if directory and not os.path.isdir(directory):
        os.makedirs(directory, exist_ok=True)

    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA + INDEXES)
    finally:
        conn.close()

@contextmanager
def connection(db_path: str) -> Iterator[sqlite3.Connection]:
    conn = get_connection(db_path)
    try:
        yield conn
    finally:
        conn.close()

@contextmanager
def read_transaction(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    Yields a connection holding a read transaction, so every query inside
    sees the same snapshot even while a monitor run keeps appending.
    """
    with connection(db_path) as conn:
        conn.execute("BEGIN")
        try:
            yield conn
        finally:
            conn.execute("ROLLBACK")

def database_exists(db_path: str) -> bool:
    return os.path.exists(db_path)
