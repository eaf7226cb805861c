from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.datetime_utils import month_bounds
from ..core.enums import AuditAction, PaymentStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..extensions import db
from ..schools.model import School
from ..system.audit import AuditService
from ..teaching.model import Lesson
from ..users.model import TeacherProfile, User
from .calculator.base import WageCalculator
from .calculator.hourly_calculator import HourlyWageCalculator
from .model import LessonHours, SchoolPayment, TeacherWageRecord
from .schemas import PaymentCreate, PaymentUpdate, WageCalculate, WageUpdate

logger = logging.getLogger(__name__)


class WageService:
    """Use case: monthly teacher wages derived from recorded lessons."""

    def __init__(self, audit: AuditService, *, calculator: Optional[WageCalculator] = None):
        self._audit = audit
        self._calculator = calculator or HourlyWageCalculator()

    def lessons_for_period(self, teacher_id: int, *, month: int, year: int) -> list[LessonHours]:
        start, end = month_bounds(year, month)
        rows = Lesson.query.filter(
            Lesson.teacher_id == teacher_id,
            Lesson.date >= start,
            Lesson.date <= end,
        ).all()
        return [
            LessonHours(lesson_id=r.id, date=r.date, hours_worked=r.hours_worked, is_cancelled=bool(r.is_cancelled))
            for r in rows
        ]

    def calculate(self, data: WageCalculate, *, actor_id: Optional[int] = None) -> list[TeacherWageRecord]:
        """Create or refresh the wage record of each teacher for the month."""
        query = User.query.join(TeacherProfile).filter(User.role == Role.TEACHER)
        if data.teacher_id is not None:
            teachers = query.filter(User.id == data.teacher_id).all()
            if not teachers:
                raise NotFoundError("Teacher not found")
        else:
            teachers = query.order_by(User.id).all()

        records = []
        for teacher in teachers:
            lessons = self.lessons_for_period(teacher.id, month=data.month, year=data.year)
            hours = self._calculator.billable_hours(lessons)
            rate = teacher.teacher_profile.hourly_rate
            amount = self._calculator.amount(hours, rate)

            record = TeacherWageRecord.query.filter_by(
                teacher_id=teacher.id, month=data.month, year=data.year
            ).first()
            if record is None:
                record = TeacherWageRecord(
                    teacher_id=teacher.id,
                    month=data.month,
                    year=data.year,
                    paid_amount=0,
                    status=PaymentStatus.PENDING,
                )
                db.session.add(record)
            record.total_hours = hours
            record.hourly_rate = rate
            record.total_amount = amount
            records.append(record)

        db.session.commit()
        logger.info("Calculated wages for %s teachers (%02d/%s)", len(records), data.month, data.year)
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="teacher_wage",
            metadata={"month": data.month, "year": data.year, "count": len(records)},
            user_id=actor_id,
        )
        return records

    def list_wages(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        teacher_id: Optional[int] = None,
    ) -> Sequence[TeacherWageRecord]:
        query = TeacherWageRecord.query
        if month is not None and year is not None:
            query = query.filter(TeacherWageRecord.month == month, TeacherWageRecord.year == year)
        if teacher_id is not None:
            query = query.filter(TeacherWageRecord.teacher_id == teacher_id)
        return query.order_by(TeacherWageRecord.year.desc(), TeacherWageRecord.month.desc(), TeacherWageRecord.id).all()

    def get_wage(self, wage_id: int) -> TeacherWageRecord:
        record = db.session.get(TeacherWageRecord, wage_id)
        if not record:
            raise NotFoundError("Wage record not found")
        return record

    def update_wage(self, wage_id: int, data: WageUpdate, *, actor_id: Optional[int] = None) -> TeacherWageRecord:
        record = self.get_wage(wage_id)
        old_values = {"paidAmount": float(record.paid_amount or 0), "status": record.status.value}
        for key, value in data.model_dump(exclude_unset=True).items():
            if key == "payment_date" and value is not None:
                value = value.replace(tzinfo=None)
            if value is None and key in ("paid_amount", "status"):
                continue
            setattr(record, key, value)
        db.session.commit()
        self._audit.log(
            action=AuditAction.UPDATE,
            entity_type="teacher_wage",
            entity_id=record.id,
            old_values=old_values,
            new_values={"paidAmount": float(record.paid_amount or 0), "status": record.status.value},
            user_id=actor_id,
        )
        return record

    def delete_wage(self, wage_id: int, *, actor_id: Optional[int] = None) -> None:
        record = self.get_wage(wage_id)
        db.session.delete(record)
        db.session.commit()
        self._audit.log(action=AuditAction.DELETE, entity_type="teacher_wage", entity_id=wage_id, user_id=actor_id)


class PaymentService:
    """Use case: monthly fees agreed with and collected from schools."""

    def __init__(self, audit: AuditService):
        self._audit = audit

    def list_payments(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        school_id: Optional[int] = None,
        status: Optional[PaymentStatus] = None,
    ) -> Sequence[SchoolPayment]:
        query = SchoolPayment.query
        if month is not None:
            query = query.filter(SchoolPayment.month == month)
        if year is not None:
            query = query.filter(SchoolPayment.year == year)
        if school_id is not None:
            query = query.filter(SchoolPayment.school_id == school_id)
        if status is not None:
            query = query.filter(SchoolPayment.status == status)
        return query.order_by(SchoolPayment.year.desc(), SchoolPayment.month.desc(), SchoolPayment.id).all()

    def get_payment(self, payment_id: int) -> SchoolPayment:
        payment = db.session.get(SchoolPayment, payment_id)
        if not payment:
            raise NotFoundError("Payment record not found")
        return payment

    def create_payment(self, data: PaymentCreate, *, actor_id: Optional[int] = None) -> SchoolPayment:
        if not db.session.get(School, data.school_id):
            raise NotFoundError("School not found")
        existing = SchoolPayment.query.filter_by(school_id=data.school_id, month=data.month, year=data.year).first()
        if existing:
            raise ValidationError("A payment record already exists for this school and period")

        payment = SchoolPayment(
            school_id=data.school_id,
            month=data.month,
            year=data.year,
            agreed_amount=data.agreed_amount,
            paid_amount=0,
            status=PaymentStatus.PENDING,
            notes=data.notes,
        )
        db.session.add(payment)
        db.session.commit()
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="school_payment",
            entity_id=payment.id,
            new_values={"schoolId": payment.school_id, "month": payment.month, "year": payment.year},
            user_id=actor_id,
        )
        return payment

    def update_payment(self, payment_id: int, data: PaymentUpdate, *, actor_id: Optional[int] = None) -> SchoolPayment:
        payment = self.get_payment(payment_id)
        old_values = {"paidAmount": float(payment.paid_amount or 0), "status": payment.status.value}
        for key, value in data.model_dump(exclude_unset=True).items():
            if key == "payment_date" and value is not None:
                value = value.replace(tzinfo=None)
            if value is None and key in ("agreed_amount", "paid_amount", "status"):
                continue
            setattr(payment, key, value)
        db.session.commit()
        self._audit.log(
            action=AuditAction.UPDATE,
            entity_type="school_payment",
            entity_id=payment.id,
            old_values=old_values,
            new_values={"paidAmount": float(payment.paid_amount or 0), "status": payment.status.value},
            user_id=actor_id,
        )
        return payment

    def delete_payment(self, payment_id: int, *, actor_id: Optional[int] = None) -> None:
        payment = self.get_payment(payment_id)
        db.session.delete(payment)
        db.session.commit()
        self._audit.log(action=AuditAction.DELETE, entity_type="school_payment", entity_id=payment_id, user_id=actor_id)
