from __future__ import annotations

from flask import Flask, jsonify
from flask_login import current_user

from ..common.auth import principal_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.get("/api/principal/dashboard", endpoint="api_principal_dashboard")
    @principal_required
    def principal_dashboard():
        return jsonify(container.principal_dashboard_service.build(current_user))
