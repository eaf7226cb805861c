from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.serialization import to_float
from ..core import constants
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError
from ..finance.model import SchoolPayment, TeacherWageRecord
from ..schools.model import SchoolClass
from ..teaching.model import Lesson, StudentAttendance, TeacherAssignment
from ..users.model import User


class PrincipalDashboardService:
    """Everything a principal sees about their own school on one page."""

    def build(self, principal: User, *, now: Optional[datetime] = None) -> dict:
        profile = principal.principal_profile
        if not profile:
            raise NotFoundError("Principal profile not found")
        school = profile.school
        now = now or now_local()
        week_ago = now - timedelta(days=constants.DASHBOARD_ATTENDANCE_DAYS)

        classes = (
            SchoolClass.query.filter(SchoolClass.school_id == school.id, SchoolClass.is_active.is_(True))
            .order_by(SchoolClass.name)
            .all()
        )
        assignments = TeacherAssignment.query.filter(
            TeacherAssignment.school_id == school.id, TeacherAssignment.is_active.is_(True)
        ).all()
        teacher_ids = {a.teacher_id for a in assignments}

        statuses = [
            status
            for (status,) in StudentAttendance.query.with_entities(StudentAttendance.status)
            .join(Lesson, StudentAttendance.lesson_id == Lesson.id)
            .join(SchoolClass, Lesson.class_id == SchoolClass.id)
            .filter(SchoolClass.school_id == school.id, Lesson.date >= week_ago)
            .all()
        ]
        present = sum(1 for s in statuses if s == AttendanceStatus.PRESENT)
        attendance_rate = present / len(statuses) * 100 if statuses else 0

        recent_lessons = (
            Lesson.query.join(SchoolClass, Lesson.class_id == SchoolClass.id)
            .filter(SchoolClass.school_id == school.id, Lesson.date >= week_ago)
            .order_by(Lesson.date.desc())
            .limit(constants.DASHBOARD_RECENT_LESSONS)
            .all()
        )

        payment = SchoolPayment.query.filter_by(school_id=school.id, month=now.month, year=now.year).first()
        wages = (
            TeacherWageRecord.query.filter(
                TeacherWageRecord.teacher_id.in_(teacher_ids),
                TeacherWageRecord.month == now.month,
                TeacherWageRecord.year == now.year,
            ).all()
            if teacher_ids
            else []
        )
        total_wages = sum(to_float(w.total_amount) for w in wages)
        paid_wages = sum(to_float(w.paid_amount) for w in wages)

        return {
            "school": {
                "id": school.id,
                "name": school.name,
                "district": school.district,
                "logoUrl": school.logo_url,
            },
            "statistics": {
                "totalClasses": len(classes),
                "totalStudents": sum(len([s for s in c.students if s.is_active]) for c in classes),
                "activeTeachers": len(teacher_ids),
                "attendanceRate": round(attendance_rate, 1),
            },
            "recentActivity": {
                "lessons": [
                    {
                        "id": lesson.id,
                        "date": lesson.date,
                        "className": lesson.school_class.name,
                        "subject": lesson.school_class.subject,
                        "teacherName": lesson.teacher.full_name,
                        "hoursWorked": to_float(lesson.hours_worked),
                        "isCancelled": lesson.is_cancelled,
                    }
                    for lesson in recent_lessons
                ]
            },
            "financial": {
                "monthlyPayment": {
                    "amount": to_float(payment.agreed_amount),
                    "status": payment.status,
                    "dueDate": payment.payment_date or datetime(payment.year, payment.month, 1),
                }
                if payment
                else None,
                "wages": {
                    "total": total_wages,
                    "paid": paid_wages,
                    "pending": total_wages - paid_wages,
                    "count": len(wages),
                },
            },
            "classes": [
                {
                    "id": c.id,
                    "name": c.name,
                    "subject": c.subject,
                    "studentCount": len([s for s in c.students if s.is_active]),
                    "teacherCount": len([a for a in assignments if a.class_id == c.id]),
                    "isAttendanceEnabled": c.is_attendance_enabled,
                }
                for c in classes
            ],
        }
