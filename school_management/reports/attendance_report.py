from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import AttendanceStatus
from ..policies.model import EffectivePolicy
from ..policies.service import PolicyService, is_student_of_concern
from ..schools.model import SchoolClass, Student
from ..teaching.model import Lesson, StudentAttendance
from .schemas import AttendanceReportRequest

CSV_HEADERS = ["Date", "Student Name", "Class", "School", "Status", "Teacher", "Notes"]


@dataclass(frozen=True)
class ReportData:
    report: dict
    headers: list[str]
    rows: list[list]


@dataclass
class StatusCounts:
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    students: set = field(default_factory=set)
    classes: set = field(default_factory=set)

    def add(self, status: AttendanceStatus) -> None:
        self.total += 1
        name = AttendanceStatus(status).value.lower()
        setattr(self, name, getattr(self, name) + 1)

    @property
    def attended(self) -> int:
        return self.present + self.late

    def rate(self) -> float:
        """Share of lessons attended (present or late), in percent."""
        if self.total == 0:
            return 0.0
        return self.attended / self.total * 100

    def counts(self) -> dict:
        return {
            "totalLessons": self.total,
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "excused": self.excused,
        }


def _school_ref(school) -> dict:
    return {"id": school.id, "name": school.name, "district": school.district}


def _class_ref(school_class: SchoolClass) -> dict:
    return {"id": school_class.id, "name": school_class.name, "school": _school_ref(school_class.school)}


def _student_ref(student: Student) -> dict:
    return {
        "id": student.id,
        "firstName": student.first_name,
        "lastName": student.last_name,
        "class": _class_ref(student.school_class),
    }


class AttendanceReportService:
    """Attendance statistics per student, class and school over a date range."""

    def __init__(self, policies: PolicyService):
        self._policies = policies

    def fetch_records(self, req: AttendanceReportRequest) -> list[StudentAttendance]:
        start = datetime.combine(req.start_date, time.min)
        end = datetime.combine(req.end_date, time.max)
        query = (
            StudentAttendance.query.join(Lesson, StudentAttendance.lesson_id == Lesson.id)
            .join(Student, StudentAttendance.student_id == Student.id)
            .join(SchoolClass, Lesson.class_id == SchoolClass.id)
            .filter(Lesson.date >= start, Lesson.date <= end)
        )
        if req.school_id is not None:
            query = query.filter(SchoolClass.school_id == req.school_id)
        if req.class_id is not None:
            query = query.filter(Lesson.class_id == req.class_id)
        return query.order_by(Lesson.date.desc(), Student.last_name.asc(), StudentAttendance.id).all()

    def build(
        self,
        req: AttendanceReportRequest,
        *,
        generated_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ReportData:
        records = self.fetch_records(req)

        by_student: dict[int, StatusCounts] = {}
        by_class: dict[int, StatusCounts] = {}
        by_school: dict[int, StatusCounts] = {}
        students: dict[int, Student] = {}

        for record in records:
            student = record.student
            school_class = student.school_class
            students[student.id] = student

            by_student.setdefault(student.id, StatusCounts()).add(record.status)

            class_stat = by_class.setdefault(school_class.id, StatusCounts())
            class_stat.add(record.status)
            class_stat.students.add(student.id)

            school_stat = by_school.setdefault(school_class.school_id, StatusCounts())
            school_stat.add(record.status)
            school_stat.students.add(student.id)
            school_stat.classes.add(school_class.id)

        policy_cache: dict[tuple[int, int], EffectivePolicy] = {}
        student_rows = []
        concern_rows = []
        for student_id, stat in by_student.items():
            student = students[student_id]
            row = {"student": _student_ref(student), **stat.counts(), "attendanceRate": round(stat.rate(), 2)}
            student_rows.append(row)

            key = (student.class_id, student.school_class.school_id)
            if key not in policy_cache:
                policy_cache[key] = self._policies.get_effective_policy(class_id=key[0], school_id=key[1], now=now)
            policy = policy_cache[key]
            if is_student_of_concern(stat.attended, stat.total, policy):
                concern_rows.append(
                    {
                        **row,
                        "policyApplied": policy.name,
                        "concernThreshold": policy.concern_threshold,
                        "isConcern": True,
                    }
                )

        classes = {r.student.school_class.id: r.student.school_class for r in records}
        class_rows = [
            {
                "class": _class_ref(classes[class_id]),
                "totalStudents": len(stat.students),
                **stat.counts(),
                "averageAttendanceRate": round(stat.rate(), 2),
            }
            for class_id, stat in by_class.items()
        ]
        schools = {c.school_id: c.school for c in classes.values()}
        school_rows = [
            {
                "school": _school_ref(schools[school_id]),
                "totalStudents": len(stat.students),
                "totalClasses": len(stat.classes),
                **stat.counts(),
                "averageAttendanceRate": round(stat.rate(), 2),
            }
            for school_id, stat in by_school.items()
        ]

        attended = sum(1 for r in records if r.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE))
        report = {
            "metadata": {
                "reportType": "attendance",
                "dateRange": {"start": req.start_date.isoformat(), "end": req.end_date.isoformat()},
                "generatedAt": (now or now_local()).isoformat(),
                "generatedBy": generated_by,
                "filters": {"schoolId": req.school_id, "classId": req.class_id},
            },
            "summary": {
                "totalRecords": len(records),
                "totalStudents": len(by_student),
                "totalClasses": len(by_class),
                "totalSchools": len(by_school),
                "studentsWithConcerns": len(concern_rows),
                "overallAttendanceRate": round(attended / len(records) * 100, 2) if records else 0,
            },
            "analytics": {
                "byStudent": student_rows,
                "byClass": class_rows,
                "bySchool": school_rows,
                "concernStudents": concern_rows,
            },
            "rawData": [self._raw(r) for r in records] if req.format.value == "json" else None,
        }
        return ReportData(report=report, headers=list(CSV_HEADERS), rows=[self._csv_row(r) for r in records])

    @staticmethod
    def _raw(record: StudentAttendance) -> dict:
        lesson = record.lesson
        return {
            "id": record.id,
            "status": record.status,
            "notes": record.notes,
            "student": _student_ref(record.student),
            "lesson": {
                "id": lesson.id,
                "date": lesson.date,
                "hoursWorked": lesson.hours_worked,
                "class": _class_ref(lesson.school_class),
                "teacher": {"firstName": lesson.teacher.first_name, "lastName": lesson.teacher.last_name},
            },
        }

    @staticmethod
    def _csv_row(record: StudentAttendance) -> list:
        lesson = record.lesson
        student = record.student
        return [
            lesson.date.strftime("%Y-%m-%d"),
            student.full_name,
            student.school_class.name,
            student.school_class.school.name,
            AttendanceStatus(record.status).value,
            lesson.teacher.full_name,
            record.notes or "",
        ]
