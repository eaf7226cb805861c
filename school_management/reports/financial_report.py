from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.serialization import to_float
from ..core.enums import PaymentStatus
from ..finance.model import SchoolPayment, TeacherWageRecord
from ..teaching.model import TeacherAssignment
from .attendance_report import ReportData
from .schemas import FinancialReportRequest

WAGE_HEADERS = [
    "Teacher Name", "Email", "Month", "Year", "Total Hours",
    "Hourly Rate", "Total Amount", "Paid Amount", "Status", "Payment Date",
]
PAYMENT_HEADERS = [
    "School Name", "District", "Month", "Year",
    "Agreed Amount", "Paid Amount", "Status", "Payment Date",
]
SUMMARY_HEADERS = ["Type", "Description", "Amount", "Status", "Details"]


def wage_analytics(records: list[TeacherWageRecord]) -> dict:
    count = len(records)
    return {
        "totalWages": sum(to_float(r.total_amount) for r in records),
        "totalPaid": sum(to_float(r.paid_amount) for r in records),
        "totalPending": sum(to_float(r.total_amount) for r in records if r.status == PaymentStatus.PENDING),
        "totalOverdue": sum(to_float(r.total_amount) for r in records if r.status == PaymentStatus.OVERDUE),
        "totalHours": sum(to_float(r.total_hours) for r in records),
        "averageHourlyRate": sum(to_float(r.hourly_rate) for r in records) / count if count else 0,
        "recordCount": count,
        "teacherCount": len({r.teacher_id for r in records}),
    }


def payment_analytics(records: list[SchoolPayment]) -> dict:
    count = len(records)
    revenue = sum(to_float(p.agreed_amount) for p in records)
    return {
        "totalRevenue": revenue,
        "totalReceived": sum(to_float(p.paid_amount) for p in records),
        "totalPending": sum(to_float(p.agreed_amount) for p in records if p.status == PaymentStatus.PENDING),
        "totalOverdue": sum(to_float(p.agreed_amount) for p in records if p.status == PaymentStatus.OVERDUE),
        "recordCount": count,
        "schoolCount": len({p.school_id for p in records}),
        "averagePayment": revenue / count if count else 0,
    }


def financial_summary(wages: Optional[dict], payments: Optional[dict]) -> dict:
    income = payments["totalReceived"] if payments else 0
    expenses = wages["totalPaid"] if wages else 0
    net = income - expenses
    receivables = payments["totalPending"] if payments else 0
    payables = wages["totalPending"] if wages else 0
    return {
        "totalIncome": income,
        "totalExpenses": expenses,
        "netResult": net,
        "netMargin": net / income * 100 if income > 0 else 0,
        "outstandingReceivables": receivables,
        "outstandingPayables": payables,
        "netOutstanding": receivables - payables,
        "cashFlow": {"incoming": receivables, "outgoing": payables, "net": receivables - payables},
    }


def _date_cell(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


class FinancialReportService:
    """Wage and school payment totals for a period, with an income/expense summary."""

    def fetch_wages(self, start: datetime, end: datetime, school_id: Optional[int]) -> list[TeacherWageRecord]:
        query = TeacherWageRecord.query.filter(
            TeacherWageRecord.created_at >= start, TeacherWageRecord.created_at <= end
        )
        if school_id is not None:
            teachers_at_school = TeacherAssignment.query.with_entities(TeacherAssignment.teacher_id).filter(
                TeacherAssignment.school_id == school_id, TeacherAssignment.is_active.is_(True)
            )
            query = query.filter(TeacherWageRecord.teacher_id.in_(teachers_at_school))
        return query.order_by(TeacherWageRecord.year.desc(), TeacherWageRecord.month.desc(), TeacherWageRecord.id).all()

    def fetch_payments(self, start: datetime, end: datetime, school_id: Optional[int]) -> list[SchoolPayment]:
        query = SchoolPayment.query.filter(SchoolPayment.created_at >= start, SchoolPayment.created_at <= end)
        if school_id is not None:
            query = query.filter(SchoolPayment.school_id == school_id)
        return query.order_by(SchoolPayment.year.desc(), SchoolPayment.month.desc(), SchoolPayment.id).all()

    def build(
        self,
        req: FinancialReportRequest,
        *,
        generated_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ReportData:
        start = datetime.combine(req.start_date, time.min)
        end = datetime.combine(req.end_date, time.max)
        report: dict = {
            "metadata": {
                "reportType": "financial",
                "subType": req.report_type,
                "dateRange": {"start": req.start_date.isoformat(), "end": req.end_date.isoformat()},
                "generatedAt": (now or now_local()).isoformat(),
                "generatedBy": generated_by,
                "filters": {"schoolId": req.school_id},
            }
        }

        wages = payments = None
        wage_rows: list[TeacherWageRecord] = []
        payment_rows: list[SchoolPayment] = []
        if req.report_type in ("wages", "summary"):
            wage_rows = self.fetch_wages(start, end, req.school_id)
            wages = wage_analytics(wage_rows)
            report["wageData"] = {"analytics": wages, "records": [r.to_dict() for r in wage_rows]}
        if req.report_type in ("payments", "summary"):
            payment_rows = self.fetch_payments(start, end, req.school_id)
            payments = payment_analytics(payment_rows)
            report["paymentData"] = {"analytics": payments, "records": [p.to_dict() for p in payment_rows]}
        if req.report_type == "summary":
            report["summary"] = financial_summary(wages, payments)

        if req.report_type == "wages":
            headers, rows = list(WAGE_HEADERS), [self._wage_row(r) for r in wage_rows]
        elif req.report_type == "payments":
            headers, rows = list(PAYMENT_HEADERS), [self._payment_row(p) for p in payment_rows]
        else:
            headers, rows = list(SUMMARY_HEADERS), self._summary_rows(report["summary"])
        return ReportData(report=report, headers=headers, rows=rows)

    @staticmethod
    def _wage_row(record: TeacherWageRecord) -> list:
        return [
            record.teacher.full_name,
            record.teacher.email,
            record.month,
            record.year,
            to_float(record.total_hours),
            to_float(record.hourly_rate),
            to_float(record.total_amount),
            to_float(record.paid_amount),
            PaymentStatus(record.status).value,
            _date_cell(record.payment_date),
        ]

    @staticmethod
    def _payment_row(payment: SchoolPayment) -> list:
        return [
            payment.school.name,
            payment.school.district,
            payment.month,
            payment.year,
            to_float(payment.agreed_amount),
            to_float(payment.paid_amount),
            PaymentStatus(payment.status).value,
            _date_cell(payment.payment_date),
        ]

    @staticmethod
    def _summary_rows(summary: dict) -> list[list]:
        def sign(value: float) -> str:
            return "Positive" if value >= 0 else "Negative"

        return [
            ["Income", "Total Income", summary["totalIncome"], "Completed", "Total received payments"],
            ["Expense", "Total Expenses", summary["totalExpenses"], "Completed", "Total paid wages"],
            [
                "Net Result", "Net Profit/Loss", summary["netResult"], sign(summary["netResult"]),
                f"Net margin: {summary['netMargin']:.2f}%",
            ],
            ["Outstanding", "Receivables", summary["outstandingReceivables"], "Pending", "Unpaid school payments"],
            ["Outstanding", "Payables", summary["outstandingPayables"], "Pending", "Unpaid teacher wages"],
            [
                "Cash Flow", "Net Outstanding", summary["netOutstanding"], sign(summary["netOutstanding"]),
                "Net cash flow from outstanding items",
            ],
        ]
