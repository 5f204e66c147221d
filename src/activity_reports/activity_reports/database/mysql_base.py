from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .connection import DatabaseConnection


@contextmanager
def _unit_of_work(
    conn_factory: DatabaseConnection,
    *,
    dictionary: bool,
    begin: Optional[Callable[[Any], None]] = None,
) -> Iterator[Tuple[Any, Any]]:
    conn = conn_factory.connect()
    try:
        if begin is not None:
            begin(conn)
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error."""
    return _unit_of_work(conn_factory, dictionary=dictionary)


def _begin_snapshot(conn) -> None:
    conn.start_transaction(consistent_snapshot=True, isolation_level="REPEATABLE READ", readonly=True)


def db_snapshot(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Read-only transaction where every SELECT sees the same snapshot.

    InnoDB REPEATABLE READ + ``WITH CONSISTENT SNAPSHOT`` pins the read view at
    START TRANSACTION instead of at the first SELECT.
    """
    return _unit_of_work(conn_factory, dictionary=dictionary, begin=_begin_snapshot)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def as_date(value: Any) -> date:
    """MySQL DATE columns come back as date, but DATETIME-typed legacy rows as datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value
