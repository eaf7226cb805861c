from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import model_validator

from ..common.schemas import CamelModel
from ..core.enums import ExportFormat


class AttendanceReportRequest(CamelModel):
    start_date: date
    end_date: date
    school_id: Optional[int] = None
    class_id: Optional[int] = None
    format: ExportFormat = ExportFormat.JSON

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class FinancialReportRequest(CamelModel):
    start_date: date
    end_date: date
    report_type: Literal["wages", "payments", "summary"] = "summary"
    school_id: Optional[int] = None
    format: ExportFormat = ExportFormat.JSON

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self
