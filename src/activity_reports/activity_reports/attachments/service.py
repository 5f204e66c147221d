from __future__ import annotations

import logging
import uuid
from typing import BinaryIO, Optional, Sequence

from werkzeug.utils import secure_filename

from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_text, require_verbatim
from ..core.constants import FILENAME_MAX_LENGTH, MIME_TYPE_MAX_LENGTH
from ..core.enums import Role
from ..core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ..reports import policy
from ..reports.model import Report
from ..reports.repository import ReportRepository
from ..storage.blob_store import BlobStore, remove_blob_quietly
from .model import NewAttachment, ReportAttachment
from .repository import AttachmentRepository

logger = logging.getLogger(__name__)


def validate_new_attachment(data: NewAttachment) -> NewAttachment:
    if int(data.file_size) <= 0:
        raise ValidationError("file_size must be positive")
    return NewAttachment(
        report_id=int(data.report_id),
        filename=require_text(data.filename, "filename", FILENAME_MAX_LENGTH),
        original_filename=require_verbatim(data.original_filename, "original_filename", FILENAME_MAX_LENGTH),
        file_path=require_text(data.file_path, "file_path"),
        file_size=int(data.file_size),
        mime_type=require_text(data.mime_type, "mime_type", MIME_TYPE_MAX_LENGTH),
    )


def storage_name(original_filename: str) -> str:
    """Unique, filesystem-safe name for an uploaded file."""
    safe = secure_filename(original_filename or "") or "file"
    name = f"{uuid.uuid4().hex}_{safe}"
    return name[:FILENAME_MAX_LENGTH]


class AttachmentService:
    def __init__(
        self,
        attachments: AttachmentRepository,
        reports: ReportRepository,
        *,
        blobs: Optional[BlobStore] = None,
        clock: Clock = now_local,
    ):
        self._attachments = attachments
        self._reports = reports
        self._blobs = blobs
        self._clock = clock

    def _report_for_upload(self, report_id: int, uploader_id: int) -> Report:
        report = self._reports.get_by_id(int(report_id))
        if not report:
            raise NotFoundError("report not found")
        if not policy.can_upload_attachment(uploader_id, report.created_by):
            raise PermissionDeniedError("only the report creator can upload attachments")
        return report

    def upload(self, data: NewAttachment, uploader_id: int) -> ReportAttachment:
        data = validate_new_attachment(data)
        self._report_for_upload(data.report_id, uploader_id)

        attachment = self._attachments.add(data=data, now=self._clock())
        logger.info("attachment %s added to report %s by user %s", attachment.id, data.report_id, uploader_id)
        return attachment

    def store_upload(
        self,
        *,
        report_id: int,
        uploader_id: int,
        original_filename: str,
        stream: BinaryIO,
        mime_type: str,
    ) -> ReportAttachment:
        """Write the bytes to the blob store, then record their metadata."""
        if self._blobs is None:
            raise RuntimeError("No blob store configured for attachment uploads")

        original_filename = require_verbatim(original_filename, "original_filename", FILENAME_MAX_LENGTH)
        report = self._report_for_upload(report_id, uploader_id)

        filename = storage_name(original_filename)
        path = f"reports/{report.id}/{filename}"
        size = self._blobs.save(path, stream)

        try:
            return self.upload(
                NewAttachment(
                    report_id=report.id,
                    filename=filename,
                    original_filename=original_filename,
                    file_path=path,
                    file_size=size,
                    mime_type=mime_type or "application/octet-stream",
                ),
                uploader_id,
            )
        except Exception:
            remove_blob_quietly(self._blobs, path)
            raise

    def list(self, report_id: int, caller_id: int, caller_role: Role) -> Sequence[ReportAttachment]:
        report = self._reports.get_by_id(int(report_id))
        if not report:
            raise NotFoundError("report not found")
        if not policy.can_view(caller_id, caller_role, report.created_by):
            raise PermissionDeniedError("you can only view attachments for your own reports")
        return self._attachments.list_for_report(report.id)

    def open(self, attachment_id: int, caller_id: int, caller_role: Role) -> Optional[tuple[ReportAttachment, BinaryIO]]:
        """Attachment and a readable stream, or ``None`` if absent/not viewable."""
        found = self._attachments.get_with_owner(int(attachment_id))
        if not found or self._blobs is None:
            return None
        attachment, owner_id = found
        if not policy.can_view(caller_id, caller_role, owner_id):
            return None
        return attachment, self._blobs.open(attachment.file_path)

    def delete(self, attachment_id: int, caller_id: int, caller_role: Role) -> bool:
        found = self._attachments.get_with_owner(int(attachment_id))
        if not found:
            return False
        attachment, owner_id = found
        if not policy.can_delete_attachment(caller_id, caller_role, owner_id):
            return False

        if not self._attachments.delete(attachment.id):
            return False

        remove_blob_quietly(self._blobs, attachment.file_path)
        logger.info("attachment %s deleted by user %s", attachment.id, caller_id)
        return True
