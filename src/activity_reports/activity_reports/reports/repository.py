from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ReportStatus
from .model import NewReport, Report, ReportPage
from .query import ReportCriteria


class ReportRepository(Protocol):
    def get_by_id(self, report_id: int) -> Optional[Report]:
        raise NotImplementedError

    def create(self, *, data: NewReport, status: ReportStatus, created_by: int, now: datetime) -> Report:
        raise NotImplementedError

    def update_fields(
        self,
        report_id: int,
        *,
        changes: dict,
        now: datetime,
        expected_status: Optional[ReportStatus] = None,
    ) -> Optional[Report]:
        """Apply ``changes`` and refresh updated_at.

        With ``expected_status`` the write only happens while the stored status
        still equals it. Returns ``None`` when no row was written.
        """

        raise NotImplementedError

    def review(
        self,
        report_id: int,
        *,
        status: ReportStatus,
        reviewer_id: int,
        comment: Optional[str],
        now: datetime,
    ) -> Optional[Report]:
        """Move a SUBMITTED report to ``status`` and record the optional comment atomically.

        Returns ``None`` if the report was no longer SUBMITTED.
        """

        raise NotImplementedError

    def delete(self, report_id: int, *, expected_status: Optional[ReportStatus] = None) -> Optional[Sequence[str]]:
        """Delete the report with its comments and attachments in one transaction.

        Returns the blob paths of the removed attachments, or ``None`` if
        nothing was deleted.
        """

        raise NotImplementedError

    def list(self, criteria: ReportCriteria) -> ReportPage:
        raise NotImplementedError

    def stats(self, *, created_by: Optional[int], recent_limit: int) -> tuple[dict[ReportStatus, int], Sequence[Report]]:
        """Per-status counts and the most recent reports, read from one snapshot."""

        raise NotImplementedError
