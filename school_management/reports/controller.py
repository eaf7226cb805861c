from __future__ import annotations

from flask import Flask, jsonify
from flask_login import current_user

from ..common.auth import report_viewer_required
from ..common.schemas import parse_body
from ..container import Container
from ..core.enums import ExportFormat, Role
from ..core.exceptions import NotFoundError
from .attendance_report import ReportData
from .export import csv_response, rows_to_frame, xlsx_response
from .schemas import AttendanceReportRequest, FinancialReportRequest


def _principal_school_id() -> int:
    profile = current_user.principal_profile
    if not profile:
        raise NotFoundError("Principal profile not found")
    return profile.school_id


def _respond(data: ReportData, fmt: ExportFormat, basename: str):
    if fmt == ExportFormat.JSON:
        return jsonify(data.report)
    frame = rows_to_frame(data.headers, data.rows)
    if fmt == ExportFormat.CSV:
        return csv_response(frame, f"{basename}.csv")
    return xlsx_response(frame, f"{basename}.xlsx")


def register(app: Flask, container: Container) -> None:
    @app.post("/api/admin/reports/attendance", endpoint="api_reports_attendance")
    @report_viewer_required
    def attendance_report():
        req = parse_body(AttendanceReportRequest)
        if current_user.role == Role.PRINCIPAL:
            req = req.model_copy(update={"school_id": _principal_school_id()})
        data = container.attendance_report_service.build(req, generated_by=current_user.email)
        return _respond(data, req.format, f"attendance-report-{req.start_date}-{req.end_date}")

    @app.post("/api/admin/reports/financial", endpoint="api_reports_financial")
    @report_viewer_required
    def financial_report():
        req = parse_body(FinancialReportRequest)
        if current_user.role == Role.PRINCIPAL:
            req = req.model_copy(update={"school_id": _principal_school_id()})
        data = container.financial_report_service.build(req, generated_by=current_user.email)
        return _respond(data, req.format, f"financial-report-{req.report_type}-{req.start_date}-{req.end_date}")
