from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .attachments.mysql_attachment_repository import MySQLAttachmentRepository
from .attachments.service import AttachmentService
from .comments.mysql_comment_repository import MySQLCommentRepository
from .comments.service import CommentService
from .dashboard.service import DashboardService
from .database.connection import DatabaseConnection, DBConfig
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.service import ReportService
from .storage.blob_store import BlobStore, LocalBlobStore
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    auth_service: AuthService
    user_service: UserService
    report_service: ReportService
    comment_service: CommentService
    attachment_service: AttachmentService
    dashboard_service: DashboardService

    conn: Optional[DatabaseConnection] = None
    blobs: Optional[BlobStore] = None


def build_container(*, db_config: dict, upload_dir: str | Path) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    blobs = LocalBlobStore(upload_dir)

    users_repo = MySQLUserRepository(conn)
    reports_repo = MySQLReportRepository(conn)
    comments_repo = MySQLCommentRepository(conn)
    attachments_repo = MySQLAttachmentRepository(conn)

    return Container(
        conn=conn,
        blobs=blobs,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        report_service=ReportService(reports_repo, users_repo, blobs=blobs),
        comment_service=CommentService(comments_repo, reports_repo, users_repo),
        attachment_service=AttachmentService(attachments_repo, reports_repo, blobs=blobs),
        dashboard_service=DashboardService(reports_repo),
    )
