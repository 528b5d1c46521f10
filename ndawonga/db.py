"""SQLite persistence helpers.

Every operation opens its own short-lived connection, so request threads never
share a connection object. Column names follow the site's original schema.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ndawonga.errors import StorageFailure

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS projects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT,
    type TEXT,
    year INTEGER,
    location TEXT,
    featured_image TEXT,
    status TEXT NOT NULL DEFAULT 'active',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS tenders (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT,
    closing_date TEXT,
    file TEXT,
    featured INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS team (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    role TEXT,
    bio TEXT,
    photo TEXT,
    linkedin TEXT
);

CREATE TABLE IF NOT EXISTS documents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    category TEXT,
    file TEXT,
    visible INTEGER NOT NULL DEFAULT 1,
    uploaded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    email TEXT,
    phone TEXT,
    subject TEXT,
    message TEXT,
    category TEXT NOT NULL DEFAULT 'General',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS quotes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    phone TEXT,
    project_type TEXT,
    area_sq_m REAL NOT NULL DEFAULT 0,
    complexity TEXT NOT NULL DEFAULT 'medium',
    estimated_cost REAL NOT NULL DEFAULT 0,
    message TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS chatbot_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL,
    user_message TEXT,
    bot_response TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def init_db(path: str) -> None:
    """Create the database file and tables if they do not exist yet."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with connect(path) as con:
        con.executescript(SCHEMA)
    logger.info("Database ready at %s", path)


@contextmanager
def connect(path: str) -> Iterator[sqlite3.Connection]:
    """Yield a connection that commits on success and always closes.

    Any sqlite3 error is re-raised as StorageFailure.
    """
    con: Optional[sqlite3.Connection] = None
    try:
        con = sqlite3.connect(path)
        con.row_factory = sqlite3.Row
        yield con
        con.commit()
    except sqlite3.Error as exc:
        if con is not None:
            con.rollback()
        raise StorageFailure(str(exc)) from exc
    finally:
        if con is not None:
            con.close()


def insert(path: str, sql: str, params: Sequence[Any]) -> int:
    """Run a single-row INSERT and return the generated id."""
    with connect(path) as con:
        cur = con.execute(sql, params)
        return int(cur.lastrowid)


def fetch_all(path: str, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    with connect(path) as con:
        return [dict(row) for row in con.execute(sql, params).fetchall()]


def fetch_one(path: str, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
    with connect(path) as con:
        row = con.execute(sql, params).fetchone()
        return dict(row) if row is not None else None
