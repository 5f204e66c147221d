from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_date
from ..common.web import current_caller, int_arg, json_body, login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.enums import ReportStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import NewReport, ReportFilters, ReportPatch, ReviewInput


def _filters_from_args() -> ReportFilters:
    status = request.args.get("status") or None
    date_from = request.args.get("activity_date_from") or None
    date_to = request.args.get("activity_date_to") or None
    try:
        parsed_status = ReportStatus(status) if status else None
    except ValueError:
        raise ValidationError("status is not a valid report status")

    return ReportFilters(
        status=parsed_status,
        created_by=int_arg("created_by"),
        activity_date_from=require_date(date_from, "activity_date_from") if date_from else None,
        activity_date_to=require_date(date_to, "activity_date_to") if date_to else None,
        search=request.args.get("search") or None,
        limit=int_arg("limit", DEFAULT_PAGE_LIMIT),
        offset=int_arg("offset", 0),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports", methods=["GET"], endpoint="list_reports")
    @login_required
    def list_reports():
        user_id, role = current_caller()
        page = container.report_service.list(_filters_from_args(), user_id, role)
        return ok(page.to_dict())

    @app.route("/api/reports", methods=["POST"], endpoint="create_report")
    @login_required
    def create_report():
        user_id, _ = current_caller()
        payload = json_body()
        report = container.report_service.create(
            NewReport(
                title=payload.get("title", ""),
                activity_date=payload.get("activity_date", ""),
                start_time=payload.get("start_time", ""),
                end_time=payload.get("end_time", ""),
                description=payload.get("description", ""),
                location=payload.get("location", ""),
                participants=payload.get("participants", ""),
                status=payload.get("status"),
            ),
            user_id,
        )
        return ok(report.to_dict(), 201)

    @app.route("/api/reports/<int:report_id>", methods=["GET"], endpoint="get_report")
    @login_required
    def get_report(report_id: int):
        user_id, role = current_caller()
        report = container.report_service.get_by_id(report_id, user_id, role)
        if not report:
            raise NotFoundError("report not found")
        return ok(report.to_dict())

    @app.route("/api/reports/<int:report_id>", methods=["PATCH"], endpoint="update_report")
    @login_required
    def update_report(report_id: int):
        user_id, _ = current_caller()
        payload = json_body()
        fields = {name: payload[name] for name in ReportPatch.FIELDS if name in payload}
        report = container.report_service.update(ReportPatch(id=report_id, **fields), user_id)
        return ok(report.to_dict())

    @app.route("/api/reports/<int:report_id>", methods=["DELETE"], endpoint="delete_report")
    @login_required
    def delete_report(report_id: int):
        user_id, role = current_caller()
        if not container.report_service.delete(report_id, user_id, role):
            raise NotFoundError("report not found")
        return ok()

    @app.route("/api/reports/<int:report_id>/submit", methods=["POST"], endpoint="submit_report")
    @login_required
    def submit_report(report_id: int):
        user_id, _ = current_caller()
        report = container.report_service.submit(report_id, user_id)
        return ok(report.to_dict())

    @app.route("/api/reports/<int:report_id>/review", methods=["POST"], endpoint="review_report")
    @login_required
    def review_report(report_id: int):
        user_id, _ = current_caller()
        payload = json_body()
        report = container.report_service.review(
            ReviewInput(
                report_id=report_id,
                status=payload.get("status", ""),
                comment=payload.get("comment"),
            ),
            user_id,
        )
        return ok(report.to_dict())

