from __future__ import annotations

from flask import Flask

from ..common.web import current_caller, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports/<int:report_id>/comments", methods=["GET"], endpoint="list_comments")
    @login_required
    def list_comments(report_id: int):
        user_id, role = current_caller()
        comments = container.comment_service.list(report_id, user_id, role)
        return ok([c.to_dict() for c in comments])

    @app.route("/api/reports/<int:report_id>/comments", methods=["POST"], endpoint="add_comment")
    @login_required
    def add_comment(report_id: int):
        user_id, _ = current_caller()
        payload = json_body()
        comment = container.comment_service.add(report_id, user_id, payload.get("comment", ""))
        return ok(comment.to_dict(), 201)
