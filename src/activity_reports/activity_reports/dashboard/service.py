from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ..core.constants import RECENT_REPORTS_LIMIT
from ..core.enums import ReportStatus, Role
from ..reports import policy
from ..reports.model import Report
from ..reports.repository import ReportRepository


@dataclass(frozen=True)
class DashboardStats:
    total_reports: int = 0
    draft_reports: int = 0
    submitted_reports: int = 0
    approved_reports: int = 0
    rejected_reports: int = 0
    recent_reports: Sequence[Report] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_reports": self.total_reports,
            "draft_reports": self.draft_reports,
            "submitted_reports": self.submitted_reports,
            "approved_reports": self.approved_reports,
            "rejected_reports": self.rejected_reports,
            "recent_reports": [r.to_dict() for r in self.recent_reports],
        }


class DashboardService:
    """Read-only rollup over the reports a caller is allowed to see."""

    def __init__(self, reports: ReportRepository, *, recent_limit: int = RECENT_REPORTS_LIMIT):
        self._reports = reports
        self._recent_limit = int(recent_limit)

    def get_stats(self, caller_id: int, caller_role: Role) -> DashboardStats:
        created_by = policy.scoped_creator(caller_id, caller_role, None)
        counts, recent = self._reports.stats(created_by=created_by, recent_limit=self._recent_limit)

        return DashboardStats(
            total_reports=sum(counts.values()),
            draft_reports=counts.get(ReportStatus.DRAFT, 0),
            submitted_reports=counts.get(ReportStatus.SUBMITTED, 0),
            approved_reports=counts.get(ReportStatus.APPROVED, 0),
            rejected_reports=counts.get(ReportStatus.REJECTED, 0),
            recent_reports=list(recent)[: self._recent_limit],
        )
