from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import NewAttachment, ReportAttachment


class AttachmentRepository(Protocol):
    def add(self, *, data: NewAttachment, now: datetime) -> ReportAttachment:
        raise NotImplementedError

    def get_with_owner(self, attachment_id: int) -> Optional[tuple[ReportAttachment, int]]:
        """The attachment and the creator id of its parent report."""

        raise NotImplementedError

    def list_for_report(self, report_id: int) -> Sequence[ReportAttachment]:
        """Oldest upload first."""

        raise NotImplementedError

    def delete(self, attachment_id: int) -> bool:
        raise NotImplementedError
