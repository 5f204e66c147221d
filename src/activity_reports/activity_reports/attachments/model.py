from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ReportAttachment:
    id: int
    report_id: int
    filename: str
    original_filename: str
    file_path: str
    file_size: int
    mime_type: str
    uploaded_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "report_id": self.report_id,
            "filename": self.filename,
            "original_filename": self.original_filename,
            "file_path": self.file_path,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "uploaded_at": self.uploaded_at.isoformat(),
        }


@dataclass(frozen=True)
class NewAttachment:
    """Metadata of a blob that is already in storage."""

    report_id: int
    filename: str
    original_filename: str
    file_path: str
    file_size: int
    mime_type: str
