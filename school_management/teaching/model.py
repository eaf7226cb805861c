from __future__ import annotations

from ..common.datetime_utils import now_local
from ..core.enums import AttendanceStatus
from ..extensions import db

lesson_topics = db.Table(
    "lesson_topics",
    db.Column("lesson_id", db.Integer, db.ForeignKey("lessons.id", ondelete="CASCADE"), primary_key=True),
    db.Column("topic_id", db.Integer, db.ForeignKey("curriculum_topics.id", ondelete="CASCADE"), primary_key=True),
)


class TeacherAssignment(db.Model):
    __tablename__ = "teacher_assignments"

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    assigned_at = db.Column(db.DateTime, nullable=False, default=now_local)

    teacher = db.relationship("User")
    school = db.relationship("School")
    school_class = db.relationship("SchoolClass")

    def to_dict(self, *, with_students: bool = False) -> dict:
        return {
            "id": self.id,
            "teacherId": self.teacher_id,
            "schoolId": self.school_id,
            "classId": self.class_id,
            "isActive": self.is_active,
            "assignedAt": self.assigned_at,
            "teacher": {
                "id": self.teacher.id,
                "firstName": self.teacher.first_name,
                "lastName": self.teacher.last_name,
                "email": self.teacher.email,
            },
            "school": {"id": self.school.id, "name": self.school.name},
            "class": self.school_class.to_dict(with_students=with_students),
        }


class CurriculumTopic(db.Model):
    __tablename__ = "curriculum_topics"

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)

    school_class = db.relationship("SchoolClass")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "teacherId": self.teacher_id,
            "classId": self.class_id,
            "title": self.title,
            "description": self.description,
            "orderIndex": self.order_index,
            "class": {"id": self.school_class.id, "name": self.school_class.name} if self.school_class else None,
        }


class Lesson(db.Model):
    __tablename__ = "lessons"

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False)
    date = db.Column(db.DateTime, nullable=False)
    hours_worked = db.Column(db.Numeric(5, 2), nullable=False)
    notes = db.Column(db.Text)
    is_cancelled = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)

    teacher = db.relationship("User")
    school_class = db.relationship("SchoolClass")
    topics = db.relationship("CurriculumTopic", secondary=lesson_topics)
    attendance = db.relationship("StudentAttendance", back_populates="lesson", cascade="all, delete-orphan")

    def to_dict(self, *, with_attendance: bool = True) -> dict:
        data = {
            "id": self.id,
            "teacherId": self.teacher_id,
            "classId": self.class_id,
            "date": self.date,
            "hoursWorked": self.hours_worked,
            "notes": self.notes,
            "isCancelled": self.is_cancelled,
            "createdAt": self.created_at,
            "class": self.school_class.to_dict(with_school=True) if self.school_class else None,
            "topics": [{"id": t.id, "title": t.title} for t in self.topics],
        }
        if with_attendance:
            data["attendance"] = [a.to_dict() for a in self.attendance]
        return data


class StudentAttendance(db.Model):
    __tablename__ = "student_attendance"
    __table_args__ = (db.UniqueConstraint("lesson_id", "student_id", name="uq_attendance_lesson_student"),)

    id = db.Column(db.Integer, primary_key=True)
    lesson_id = db.Column(db.Integer, db.ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False)
    status = db.Column(db.Enum(AttendanceStatus, native_enum=False, length=20), nullable=False)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)

    lesson = db.relationship("Lesson", back_populates="attendance")
    student = db.relationship("Student")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "lessonId": self.lesson_id,
            "studentId": self.student_id,
            "status": self.status,
            "notes": self.notes,
            "student": {
                "id": self.student.id,
                "firstName": self.student.first_name,
                "lastName": self.student.last_name,
            } if self.student else None,
        }
