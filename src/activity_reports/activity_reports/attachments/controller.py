from __future__ import annotations

from flask import Flask, request, send_file

from ..common.web import current_caller, login_required, ok
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports/<int:report_id>/attachments", methods=["GET"], endpoint="list_attachments")
    @login_required
    def list_attachments(report_id: int):
        user_id, role = current_caller()
        attachments = container.attachment_service.list(report_id, user_id, role)
        return ok([a.to_dict() for a in attachments])

    @app.route("/api/reports/<int:report_id>/attachments", methods=["POST"], endpoint="upload_attachment")
    @login_required
    def upload_attachment(report_id: int):
        user_id, _ = current_caller()
        file = request.files.get("file")
        if not file or not file.filename:
            raise ValidationError("missing file")

        attachment = container.attachment_service.store_upload(
            report_id=report_id,
            uploader_id=user_id,
            original_filename=file.filename,
            stream=file.stream,
            mime_type=file.mimetype,
        )
        return ok(attachment.to_dict(), 201)

    @app.route("/api/attachments/<int:attachment_id>/download", methods=["GET"], endpoint="download_attachment")
    @login_required
    def download_attachment(attachment_id: int):
        user_id, role = current_caller()
        found = container.attachment_service.open(attachment_id, user_id, role)
        if not found:
            raise NotFoundError("attachment not found")
        attachment, stream = found
        return send_file(
            stream,
            mimetype=attachment.mime_type,
            as_attachment=True,
            download_name=attachment.original_filename,
        )

    @app.route("/api/attachments/<int:attachment_id>", methods=["DELETE"], endpoint="delete_attachment")
    @login_required
    def delete_attachment(attachment_id: int):
        user_id, role = current_caller()
        if not container.attachment_service.delete(attachment_id, user_id, role):
            raise NotFoundError("attachment not found")
        return ok()
