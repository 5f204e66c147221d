from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterable, Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # username, email, password, full name, role
    ("admin", "admin@example.com", "admin123", "Admin Demo", "ADMIN"),
    ("pimpinan", "pimpinan@example.com", "pimpinan123", "Pimpinan Demo", "PIMPINAN"),
    ("staff", "staff@example.com", "staff123", "Staff Demo", "STAFF"),
)

# Quoted literals first so ';' and '--' inside them are kept as text.
_SQL_TOKEN_RE = re.compile(
    r"""'(?:[^'\\]|\\.)*'"""
    r'''|"(?:[^"\\]|\\.)*"'''
    r"|--[^\n]*"
    r"|;"
    r"""|[^'";-]+"""
    r"|.",
    re.S,
)

# schema.sql names its own database; the configured one wins.
_SKIPPED_PREFIXES = ("CREATE DATABASE", "USE ")


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on top-level ``;`` and drop ``--`` line comments."""
    parts: list[str] = []
    for match in _SQL_TOKEN_RE.finditer(sql):
        token = match.group(0)
        if token == ";":
            stmt = "".join(parts).strip()
            parts = []
            if stmt:
                yield stmt
        elif not token.startswith("--"):
            parts.append(token)

    stmt = "".join(parts).strip()
    if stmt:
        yield stmt


def schema_statements(sql: str) -> Iterable[str]:
    for stmt in iter_sql_statements(sql):
        if " ".join(stmt.split()).upper().startswith(_SKIPPED_PREFIXES):
            continue
        yield stmt


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    with closing(_connect(target, with_database=False)) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = DBConfig.from_mapping(db_config)
    ensure_database_exists(db_config)

    statements = list(schema_statements(Path(schema_path).read_text(encoding="utf-8")))
    with closing(_connect(target)) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    logger.info("schema applied to %s (%d statements)", target.database, len(statements))


def ensure_demo_users(db_config: dict) -> None:
    """Upsert one demo account per role; re-running resets their passwords."""
    rows = [
        (username, email, generate_password_hash(password), full_name, role)
        for username, email, password, full_name, role in DEMO_USERS
    ]
    with closing(_connect(DBConfig.from_mapping(db_config))) as conn:
        cur = conn.cursor()
        cur.executemany(
            """
            INSERT INTO users (username, email, password_hash, full_name, role)
            VALUES (%s, %s, %s, %s, %s)
            ON DUPLICATE KEY UPDATE
                email=VALUES(email),
                password_hash=VALUES(password_hash),
                full_name=VALUES(full_name),
                role=VALUES(role),
                updated_at=NOW()
            """,
            rows,
        )
        conn.commit()
    logger.info("demo users ready (%d accounts)", len(rows))


def list_tables(db_config: dict) -> list[str]:
    with closing(_connect(DBConfig.from_mapping(db_config))) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
