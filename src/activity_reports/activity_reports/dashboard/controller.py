from __future__ import annotations

from flask import Flask

from ..common.web import current_caller, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        user_id, role = current_caller()
        stats = container.dashboard_service.get_stats(user_id, role)
        return ok(stats.to_dict())
