from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class ReportComment:
    id: int
    report_id: int
    user_id: int
    comment: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "report_id": self.report_id,
            "user_id": self.user_id,
            "comment": self.comment,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class CommentView:
    """A comment joined with its author, for listing."""

    comment: ReportComment
    author_full_name: Optional[str]
    author_role: Optional[Role]

    def to_dict(self) -> dict:
        out = self.comment.to_dict()
        out["user_full_name"] = self.author_full_name
        out["user_role"] = self.author_role.value if self.author_role else None
        return out
