from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import CommentView, ReportComment


class CommentRepository(Protocol):
    def add(self, *, report_id: int, user_id: int, comment: str, now: datetime) -> ReportComment:
        raise NotImplementedError

    def list_for_report(self, report_id: int) -> Sequence[CommentView]:
        """Oldest first."""

        raise NotImplementedError
