from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ..common.datetime_utils import now_local
from ..core.enums import PaymentStatus
from ..extensions import db


@dataclass(frozen=True)
class LessonHours:
    """One lesson as seen by wage calculation."""

    lesson_id: int
    date: datetime
    hours_worked: Decimal
    is_cancelled: bool = False


class TeacherWageRecord(db.Model):
    __tablename__ = "teacher_wage_records"
    __table_args__ = (db.UniqueConstraint("teacher_id", "month", "year", name="uq_wage_teacher_period"),)

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    month = db.Column(db.Integer, nullable=False)
    year = db.Column(db.Integer, nullable=False)
    total_hours = db.Column(db.Numeric(8, 2), nullable=False, default=0)
    hourly_rate = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    payment_date = db.Column(db.DateTime)
    status = db.Column(db.Enum(PaymentStatus, native_enum=False, length=20), nullable=False, default=PaymentStatus.PENDING)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_local, onupdate=now_local)

    teacher = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "teacherId": self.teacher_id,
            "month": self.month,
            "year": self.year,
            "totalHours": self.total_hours,
            "hourlyRate": self.hourly_rate,
            "totalAmount": self.total_amount,
            "paidAmount": self.paid_amount,
            "paymentDate": self.payment_date,
            "status": self.status,
            "notes": self.notes,
            "createdAt": self.created_at,
            "teacher": {
                "id": self.teacher.id,
                "firstName": self.teacher.first_name,
                "lastName": self.teacher.last_name,
                "email": self.teacher.email,
            } if self.teacher else None,
        }


class SchoolPayment(db.Model):
    __tablename__ = "school_payments"
    __table_args__ = (db.UniqueConstraint("school_id", "month", "year", name="uq_payment_school_period"),)

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    month = db.Column(db.Integer, nullable=False)
    year = db.Column(db.Integer, nullable=False)
    agreed_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    payment_date = db.Column(db.DateTime)
    status = db.Column(db.Enum(PaymentStatus, native_enum=False, length=20), nullable=False, default=PaymentStatus.PENDING)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_local, onupdate=now_local)

    school = db.relationship("School")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "schoolId": self.school_id,
            "month": self.month,
            "year": self.year,
            "agreedAmount": self.agreed_amount,
            "paidAmount": self.paid_amount,
            "paymentDate": self.payment_date,
            "status": self.status,
            "notes": self.notes,
            "createdAt": self.created_at,
            "school": {"id": self.school.id, "name": self.school.name} if self.school else None,
        }
