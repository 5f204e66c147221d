from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewAttachment, ReportAttachment
from .repository import AttachmentRepository

_COLUMNS = "a.id, a.report_id, a.filename, a.original_filename, a.file_path, a.file_size, a.mime_type, a.uploaded_at"


def _to_attachment(row: dict) -> ReportAttachment:
    return ReportAttachment(
        id=int(row["id"]),
        report_id=int(row["report_id"]),
        filename=row["filename"],
        original_filename=row["original_filename"],
        file_path=row["file_path"],
        file_size=int(row["file_size"]),
        mime_type=row["mime_type"],
        uploaded_at=row["uploaded_at"],
    )


class MySQLAttachmentRepository(AttachmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, *, data: NewAttachment, now: datetime) -> ReportAttachment:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO report_attachments(
                    report_id, filename, original_filename, file_path, file_size, mime_type, uploaded_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(data.report_id),
                    data.filename,
                    data.original_filename,
                    data.file_path,
                    int(data.file_size),
                    data.mime_type,
                    now,
                ),
            )
            attachment_id = int(cur.lastrowid)
        return ReportAttachment(
            id=attachment_id,
            report_id=int(data.report_id),
            filename=data.filename,
            original_filename=data.original_filename,
            file_path=data.file_path,
            file_size=int(data.file_size),
            mime_type=data.mime_type,
            uploaded_at=now,
        )

    def get_with_owner(self, attachment_id: int) -> Optional[tuple[ReportAttachment, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, r.created_by
                FROM report_attachments a
                JOIN reports r ON r.id = a.report_id
                WHERE a.id=%s
                """,
                (int(attachment_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return _to_attachment(row), int(row["created_by"])

    def list_for_report(self, report_id: int) -> Sequence[ReportAttachment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM report_attachments a
                WHERE a.report_id=%s
                ORDER BY a.uploaded_at ASC, a.id ASC
                """,
                (int(report_id),),
            )
            return [_to_attachment(r) for r in fetchall(cur)]

    def delete(self, attachment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM report_attachments WHERE id=%s", (int(attachment_id),))
            return cur.rowcount > 0
