from __future__ import annotations

import io
import threading
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from activity_reports.attachments.model import NewAttachment, ReportAttachment
from activity_reports.attachments.service import AttachmentService
from activity_reports.comments.model import CommentView, ReportComment
from activity_reports.comments.service import CommentService
from activity_reports.common.fields import UNSET, is_set
from activity_reports.container import Container
from activity_reports.core.enums import ReportStatus, Role
from activity_reports.dashboard.service import DashboardService
from activity_reports.reports.model import NewReport, Report, ReportPage
from activity_reports.reports.query import ReportCriteria
from activity_reports.reports.service import ReportService
from activity_reports.users.model import User
from activity_reports.users.service import AuthService, UserService


class InMemoryDB:
    """Shared tables for the fake repositories below."""

    def __init__(self):
        self.lock = threading.RLock()
        self.users: dict[int, User] = {}
        self.reports: dict[int, Report] = {}
        self.comments: dict[int, ReportComment] = {}
        self.attachments: dict[int, ReportAttachment] = {}
        self._ids = {"users": 0, "reports": 0, "comments": 0, "attachments": 0}

    def next_id(self, table: str) -> int:
        with self.lock:
            self._ids[table] += 1
            return self._ids[table]


class FakeUsers:
    def __init__(self, db: InMemoryDB):
        self._db = db

    def get_by_id(self, user_id):
        return self._db.users.get(int(user_id))

    def get_by_username(self, username):
        return next((u for u in self._db.users.values() if u.username == username), None)

    def get_by_email(self, email):
        return next((u for u in self._db.users.values() if u.email == email), None)

    def create_user(self, *, username, email, password_hash, full_name, role, now):
        uid = self._db.next_id("users")
        user = User(
            id=uid,
            username=username,
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            role=role,
            created_at=now,
            updated_at=now,
        )
        self._db.users[uid] = user
        return user

    def update_profile(self, user_id, *, now, email=UNSET, full_name=UNSET, password_hash=UNSET):
        user = self._db.users.get(int(user_id))
        if not user:
            return None
        changes = {"updated_at": now}
        for name, value in (("email", email), ("full_name", full_name), ("password_hash", password_hash)):
            if is_set(value):
                changes[name] = value
        user = replace(user, **changes)
        self._db.users[user.id] = user
        return user

    def list_all(self):
        return sorted(self._db.users.values(), key=lambda u: u.username)


def _matches(r: Report, c: ReportCriteria) -> bool:
    if c.created_by is not None and r.created_by != c.created_by:
        return False
    if c.status is not None and r.status != c.status:
        return False
    if c.date_from is not None and r.activity_date < c.date_from:
        return False
    if c.date_to is not None and r.activity_date > c.date_to:
        return False
    if c.search:
        term = c.search.lower()
        if not any(term in field.lower() for field in (r.title, r.description, r.location)):
            return False
    return True


def _newest_first(reports):
    return sorted(reports, key=lambda r: (r.created_at, r.id), reverse=True)


class FakeReports:
    def __init__(self, db: InMemoryDB):
        self._db = db

    def get_by_id(self, report_id):
        return self._db.reports.get(int(report_id))

    def create(self, *, data: NewReport, status, created_by, now):
        rid = self._db.next_id("reports")
        report = Report(
            id=rid,
            title=data.title,
            activity_date=data.activity_date,
            start_time=data.start_time,
            end_time=data.end_time,
            description=data.description,
            location=data.location,
            participants=data.participants,
            status=status,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self._db.reports[rid] = report
        return report

    def update_fields(self, report_id, *, changes, now, expected_status=None):
        with self._db.lock:
            report = self._db.reports.get(int(report_id))
            if not report:
                return None
            if expected_status is not None and report.status != expected_status:
                return None
            report = replace(report, updated_at=now, **changes)
            self._db.reports[report.id] = report
            return report

    def review(self, report_id, *, status, reviewer_id, comment, now):
        with self._db.lock:
            report = self._db.reports.get(int(report_id))
            if not report or report.status != ReportStatus.SUBMITTED:
                return None
            report = replace(report, status=status, updated_at=now)
            self._db.reports[report.id] = report
            if comment:
                cid = self._db.next_id("comments")
                self._db.comments[cid] = ReportComment(
                    id=cid, report_id=report.id, user_id=int(reviewer_id), comment=comment, created_at=now
                )
            return report

    def delete(self, report_id, *, expected_status=None):
        with self._db.lock:
            report = self._db.reports.get(int(report_id))
            if not report:
                return None
            if expected_status is not None and report.status != expected_status:
                return None
            paths = [a.file_path for a in self._db.attachments.values() if a.report_id == report.id]
            for cid in [c.id for c in self._db.comments.values() if c.report_id == report.id]:
                del self._db.comments[cid]
            for aid in [a.id for a in self._db.attachments.values() if a.report_id == report.id]:
                del self._db.attachments[aid]
            del self._db.reports[report.id]
            return paths

    def list(self, criteria: ReportCriteria):
        with self._db.lock:
            matching = _newest_first(r for r in self._db.reports.values() if _matches(r, criteria))
        page = matching[criteria.offset : criteria.offset + criteria.limit]
        return ReportPage(reports=page, total=len(matching))

    def stats(self, *, created_by, recent_limit):
        with self._db.lock:
            scoped = [r for r in self._db.reports.values() if created_by is None or r.created_by == created_by]
            counts = {status: 0 for status in ReportStatus}
            for r in scoped:
                counts[r.status] += 1
            return counts, _newest_first(scoped)[:recent_limit]


class FakeComments:
    def __init__(self, db: InMemoryDB):
        self._db = db

    def add(self, *, report_id, user_id, comment, now):
        cid = self._db.next_id("comments")
        c = ReportComment(id=cid, report_id=int(report_id), user_id=int(user_id), comment=comment, created_at=now)
        self._db.comments[cid] = c
        return c

    def list_for_report(self, report_id):
        rows = sorted(
            (c for c in self._db.comments.values() if c.report_id == int(report_id)),
            key=lambda c: (c.created_at, c.id),
        )
        out = []
        for c in rows:
            author = self._db.users.get(c.user_id)
            out.append(
                CommentView(
                    comment=c,
                    author_full_name=author.full_name if author else None,
                    author_role=author.role if author else None,
                )
            )
        return out


class FakeAttachments:
    def __init__(self, db: InMemoryDB):
        self._db = db

    def add(self, *, data: NewAttachment, now):
        aid = self._db.next_id("attachments")
        a = ReportAttachment(
            id=aid,
            report_id=data.report_id,
            filename=data.filename,
            original_filename=data.original_filename,
            file_path=data.file_path,
            file_size=data.file_size,
            mime_type=data.mime_type,
            uploaded_at=now,
        )
        self._db.attachments[aid] = a
        return a

    def get_with_owner(self, attachment_id):
        a = self._db.attachments.get(int(attachment_id))
        if not a:
            return None
        return a, self._db.reports[a.report_id].created_by

    def list_for_report(self, report_id):
        return sorted(
            (a for a in self._db.attachments.values() if a.report_id == int(report_id)),
            key=lambda a: (a.uploaded_at, a.id),
        )

    def delete(self, attachment_id):
        return self._db.attachments.pop(int(attachment_id), None) is not None


class FakeBlobs:
    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.fail_on_delete = False

    def save(self, path, stream):
        data = stream.read()
        self.files[path] = data
        return len(data)

    def open(self, path):
        return io.BytesIO(self.files[path])

    def delete(self, path):
        if self.fail_on_delete:
            raise OSError("disk on fire")
        return self.files.pop(path, None) is not None


class TickingClock:
    """Each call returns a time one second later than the last."""

    def __init__(self, start: datetime):
        self._now = start

    def __call__(self) -> datetime:
        current = self._now
        self._now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 15, 8, 0, 0)


@pytest.fixture
def clock(fixed_now):
    return TickingClock(fixed_now)


@pytest.fixture
def db():
    return InMemoryDB()


@pytest.fixture
def blobs():
    return FakeBlobs()


@pytest.fixture
def users_repo(db):
    return FakeUsers(db)


@pytest.fixture
def reports_repo(db):
    return FakeReports(db)


@pytest.fixture
def report_service(reports_repo, users_repo, blobs, clock):
    return ReportService(reports_repo, users_repo, blobs=blobs, clock=clock)


@pytest.fixture
def comment_service(db, reports_repo, users_repo, clock):
    return CommentService(FakeComments(db), reports_repo, users_repo, clock=clock)


@pytest.fixture
def attachment_service(db, reports_repo, blobs, clock):
    return AttachmentService(FakeAttachments(db), reports_repo, blobs=blobs, clock=clock)


@pytest.fixture
def dashboard_service(reports_repo):
    return DashboardService(reports_repo)


@pytest.fixture
def container(users_repo, report_service, comment_service, attachment_service, dashboard_service, blobs, clock):
    return Container(
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, clock=clock),
        report_service=report_service,
        comment_service=comment_service,
        attachment_service=attachment_service,
        dashboard_service=dashboard_service,
        blobs=blobs,
    )


@pytest.fixture
def make_user(users_repo, fixed_now):
    def _make(username: str, role: Role, *, password_hash: str = "not-a-real-hash") -> User:
        return users_repo.create_user(
            username=username,
            email=f"{username}@example.com",
            password_hash=password_hash,
            full_name=username.title(),
            role=role,
            now=fixed_now,
        )

    return _make


@pytest.fixture
def staff(make_user):
    return make_user("staff1", Role.STAFF)


@pytest.fixture
def other_staff(make_user):
    return make_user("staff2", Role.STAFF)


@pytest.fixture
def pimpinan(make_user):
    return make_user("pimpinan1", Role.PIMPINAN)


@pytest.fixture
def admin(make_user):
    return make_user("admin1", Role.ADMIN)


def new_report(**overrides) -> NewReport:
    fields = dict(
        title="T",
        activity_date=date(2024, 1, 15),
        start_time="09:00",
        end_time="12:00",
        description="D",
        location="L",
        participants="P",
        status=None,
    )
    fields.update(overrides)
    return NewReport(**fields)


@pytest.fixture
def create_report(report_service, reports_repo):
    def _create(owner: User, status: Optional[ReportStatus] = None, **overrides) -> Report:
        report = report_service.create(new_report(**overrides), owner.id)
        if status is not None and status != report.status:
            # Seed lifecycle states directly, bypassing the review flow.
            report = reports_repo.update_fields(report.id, changes={"status": status}, now=report.updated_at)
        return report

    return _create
