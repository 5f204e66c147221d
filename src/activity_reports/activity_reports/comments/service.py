from __future__ import annotations

import logging
from typing import Sequence

from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import NotFoundError, PermissionDeniedError
from ..reports import policy
from ..reports.repository import ReportRepository
from ..users.repository import UserRepository
from .model import CommentView, ReportComment
from .repository import CommentRepository

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(
        self,
        comments: CommentRepository,
        reports: ReportRepository,
        users: UserRepository,
        *,
        clock: Clock = now_local,
    ):
        self._comments = comments
        self._reports = reports
        self._users = users
        self._clock = clock

    def add(self, report_id: int, author_id: int, text: str) -> ReportComment:
        text = require_non_empty(text, "comment")

        author = self._users.get_by_id(int(author_id))
        if not author:
            raise NotFoundError(f"user with id {author_id} not found")

        report = self._reports.get_by_id(int(report_id))
        if not report:
            raise NotFoundError("report not found")
        if not policy.can_comment(author.id, author.role, report.created_by):
            raise PermissionDeniedError("you can only comment on reports you can view")

        comment = self._comments.add(report_id=report.id, user_id=author.id, comment=text, now=self._clock())
        logger.info("comment %s added to report %s by user %s", comment.id, report.id, author.id)
        return comment

    def list(self, report_id: int, caller_id: int, caller_role: Role) -> Sequence[CommentView]:
        """Missing and hidden reports raise the same 403; attachment listing tells them apart."""
        report = self._reports.get_by_id(int(report_id))
        if not report or not policy.can_view(caller_id, caller_role, report.created_by):
            raise PermissionDeniedError("report not found or access denied")
        return self._comments.list_for_report(report.id)
