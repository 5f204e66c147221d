from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.fields import UNSET, Maybe, is_set
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.enums import ReportStatus


@dataclass(frozen=True)
class Report:
    id: int
    title: str
    activity_date: date
    start_time: str
    end_time: str
    description: str
    location: str
    participants: str
    status: ReportStatus
    created_by: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "activity_date": self.activity_date.strftime("%Y-%m-%d"),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "description": self.description,
            "location": self.location,
            "participants": self.participants,
            "status": self.status.value,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class NewReport:
    title: str
    activity_date: date
    start_time: str
    end_time: str
    description: str
    location: str
    participants: str
    status: Optional[ReportStatus] = None


@dataclass(frozen=True)
class ReportPatch:
    """Partial update: fields left as ``UNSET`` are not touched."""

    id: int
    title: Maybe[str] = UNSET
    activity_date: Maybe[date] = UNSET
    start_time: Maybe[str] = UNSET
    end_time: Maybe[str] = UNSET
    description: Maybe[str] = UNSET
    location: Maybe[str] = UNSET
    participants: Maybe[str] = UNSET
    status: Maybe[ReportStatus] = UNSET

    FIELDS = (
        "title",
        "activity_date",
        "start_time",
        "end_time",
        "description",
        "location",
        "participants",
        "status",
    )

    def changes(self) -> dict:
        return {name: getattr(self, name) for name in self.FIELDS if is_set(getattr(self, name))}


@dataclass(frozen=True)
class ReportFilters:
    status: Optional[ReportStatus] = None
    created_by: Optional[int] = None
    activity_date_from: Optional[date] = None
    activity_date_to: Optional[date] = None
    search: Optional[str] = None
    limit: int = DEFAULT_PAGE_LIMIT
    offset: int = 0


@dataclass(frozen=True)
class ReportPage:
    reports: Sequence[Report] = field(default_factory=list)
    total: int = 0

    def to_dict(self) -> dict:
        return {"reports": [r.to_dict() for r in self.reports], "total": self.total}


@dataclass(frozen=True)
class ReviewInput:
    report_id: int
    status: ReportStatus
    comment: Optional[str] = None
