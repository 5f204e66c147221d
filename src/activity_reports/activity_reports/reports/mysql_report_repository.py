from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ReportStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, db_snapshot, fetchall, fetchone
from .model import NewReport, Report, ReportPage
from .query import ReportCriteria, build_where
from .repository import ReportRepository

_COLUMNS = (
    "r.id, r.title, r.activity_date, r.start_time, r.end_time, r.description, "
    "r.location, r.participants, r.status, r.created_by, r.created_at, r.updated_at"
)

_UPDATABLE = {
    "title",
    "activity_date",
    "start_time",
    "end_time",
    "description",
    "location",
    "participants",
    "status",
}


def _to_report(row: dict) -> Report:
    return Report(
        id=int(row["id"]),
        title=row["title"],
        activity_date=as_date(row["activity_date"]),
        start_time=row["start_time"],
        end_time=row["end_time"],
        description=row["description"],
        location=row["location"],
        participants=row["participants"],
        status=ReportStatus(row["status"]),
        created_by=int(row["created_by"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _select_one(cur, report_id: int) -> Optional[Report]:
    cur.execute(f"SELECT {_COLUMNS} FROM reports r WHERE r.id=%s", (int(report_id),))
    row = fetchone(cur)
    return _to_report(row) if row else None


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, report_id: int) -> Optional[Report]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _select_one(cur, report_id)

    def create(self, *, data: NewReport, status: ReportStatus, created_by: int, now: datetime) -> Report:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO reports(
                    title, activity_date, start_time, end_time, description,
                    location, participants, status, created_by, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.title,
                    data.activity_date,
                    data.start_time,
                    data.end_time,
                    data.description,
                    data.location,
                    data.participants,
                    status.value,
                    int(created_by),
                    now,
                    now,
                ),
            )
            report_id = int(cur.lastrowid)
        return Report(
            id=report_id,
            title=data.title,
            activity_date=data.activity_date,
            start_time=data.start_time,
            end_time=data.end_time,
            description=data.description,
            location=data.location,
            participants=data.participants,
            status=status,
            created_by=int(created_by),
            created_at=now,
            updated_at=now,
        )

    def update_fields(
        self,
        report_id: int,
        *,
        changes: dict,
        now: datetime,
        expected_status: Optional[ReportStatus] = None,
    ) -> Optional[Report]:
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported report columns: {sorted(unknown)}")

        assignments = ["updated_at=%s"]
        params: list[object] = [now]
        for column, value in changes.items():
            assignments.append(f"{column}=%s")
            params.append(value.value if isinstance(value, ReportStatus) else value)

        where = "id=%s"
        params.append(int(report_id))
        if expected_status is not None:
            where += " AND status=%s"
            params.append(expected_status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE reports SET {', '.join(assignments)} WHERE {where}", tuple(params))
            if cur.rowcount <= 0:
                return None
            return _select_one(cur, report_id)

    def review(
        self,
        report_id: int,
        *,
        status: ReportStatus,
        reviewer_id: int,
        comment: Optional[str],
        now: datetime,
    ) -> Optional[Report]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Compare-and-set: a concurrent reviewer that got here first leaves rowcount at 0.
            cur.execute(
                "UPDATE reports SET status=%s, updated_at=%s WHERE id=%s AND status=%s",
                (status.value, now, int(report_id), ReportStatus.SUBMITTED.value),
            )
            if cur.rowcount <= 0:
                return None
            if comment:
                cur.execute(
                    "INSERT INTO report_comments(report_id, user_id, comment, created_at) VALUES(%s,%s,%s,%s)",
                    (int(report_id), int(reviewer_id), comment, now),
                )
            return _select_one(cur, report_id)

    def delete(self, report_id: int, *, expected_status: Optional[ReportStatus] = None) -> Optional[Sequence[str]]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Lock the row so the status check and the delete see the same state.
            cur.execute("SELECT status FROM reports WHERE id=%s FOR UPDATE", (int(report_id),))
            row = fetchone(cur)
            if not row:
                return None
            if expected_status is not None and row["status"] != expected_status.value:
                return None

            cur.execute("SELECT file_path FROM report_attachments WHERE report_id=%s", (int(report_id),))
            paths = [r["file_path"] for r in fetchall(cur)]

            cur.execute("DELETE FROM report_comments WHERE report_id=%s", (int(report_id),))
            cur.execute("DELETE FROM report_attachments WHERE report_id=%s", (int(report_id),))
            cur.execute("DELETE FROM reports WHERE id=%s", (int(report_id),))
            if cur.rowcount <= 0:
                return None
            return paths

    def list(self, criteria: ReportCriteria) -> ReportPage:
        where, params = build_where(criteria)
        with db_snapshot(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM reports r WHERE {where}", tuple(params))
            total = int(fetchone(cur)["total"])
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM reports r
                WHERE {where}
                ORDER BY r.created_at DESC, r.id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(criteria.limit), int(criteria.offset)]),
            )
            reports = [_to_report(r) for r in fetchall(cur)]
        return ReportPage(reports=reports, total=total)

    def stats(self, *, created_by: Optional[int], recent_limit: int) -> tuple[dict[ReportStatus, int], Sequence[Report]]:
        where, params = build_where(ReportCriteria(created_by=created_by))
        counts = {status: 0 for status in ReportStatus}
        with db_snapshot(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT r.status, COUNT(*) AS n FROM reports r WHERE {where} GROUP BY r.status",
                tuple(params),
            )
            for row in fetchall(cur):
                counts[ReportStatus(row["status"])] = int(row["n"])
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM reports r
                WHERE {where}
                ORDER BY r.created_at DESC, r.id DESC
                LIMIT %s
                """,
                tuple(params + [int(recent_limit)]),
            )
            recent = [_to_report(r) for r in fetchall(cur)]
        return counts, recent
