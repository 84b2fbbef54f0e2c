"""Database engine and transaction helpers."""

from __future__ import annotations

import functools
import os
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine


DEFAULT_DATABASE_URL = "postgresql://user:pass@db:5432/dealer"


def create_engine_from_env() -> Engine:
    """Create an engine using the DATABASE_URL environment variable."""
    url = os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)
    return create_engine(url, pool_pre_ping=True, future=True)


@functools.lru_cache()
def get_engine() -> Engine:
    return create_engine_from_env()


@contextmanager
def transaction(engine: Engine) -> Iterator[Connection]:
    """Run a block inside one transaction with snapshot reads.

    Commits when the block exits normally and rolls back on any exception.
    The connection goes back to the pool on every exit path.
    """
    with engine.connect() as conn:
        if conn.dialect.name == "postgresql":
            conn.execution_options(isolation_level="REPEATABLE READ")
        with conn.begin():
            yield conn
