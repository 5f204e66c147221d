from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import CommentView, ReportComment
from .repository import CommentRepository


class MySQLCommentRepository(CommentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, *, report_id: int, user_id: int, comment: str, now: datetime) -> ReportComment:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO report_comments(report_id, user_id, comment, created_at) VALUES(%s,%s,%s,%s)",
                (int(report_id), int(user_id), comment, now),
            )
            comment_id = int(cur.lastrowid)
        return ReportComment(
            id=comment_id,
            report_id=int(report_id),
            user_id=int(user_id),
            comment=comment,
            created_at=now,
        )

    def list_for_report(self, report_id: int) -> Sequence[CommentView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.id, c.report_id, c.user_id, c.comment, c.created_at,
                       u.full_name, u.role
                FROM report_comments c
                JOIN users u ON u.id = c.user_id
                WHERE c.report_id=%s
                ORDER BY c.created_at ASC, c.id ASC
                """,
                (int(report_id),),
            )
            rows = fetchall(cur)
            out: list[CommentView] = []
            for r in rows:
                out.append(
                    CommentView(
                        comment=ReportComment(
                            id=int(r["id"]),
                            report_id=int(r["report_id"]),
                            user_id=int(r["user_id"]),
                            comment=r["comment"],
                            created_at=r["created_at"],
                        ),
                        author_full_name=r["full_name"],
                        author_role=Role(r["role"]),
                    )
                )
            return out
