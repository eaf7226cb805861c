from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.enums import AuditAction, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..schools.model import School, SchoolClass, Student
from ..system.audit import AuditService
from ..users.model import User
from .model import CurriculumTopic, Lesson, StudentAttendance, TeacherAssignment
from .schemas import AssignmentCreate, LessonCreate, TopicCreate

logger = logging.getLogger(__name__)


class AssignmentService:
    """Use case: admins assign teachers to classes."""

    def __init__(self, audit: AuditService):
        self._audit = audit

    def list_assignments(self) -> Sequence[TeacherAssignment]:
        return TeacherAssignment.query.order_by(
            TeacherAssignment.assigned_at.desc(), TeacherAssignment.id.desc()
        ).all()

    def create_assignment(self, data: AssignmentCreate, *, actor_id: Optional[int] = None) -> TeacherAssignment:
        teacher = db.session.get(User, data.teacher_id)
        if not teacher or teacher.role != Role.TEACHER:
            raise NotFoundError("Selected teacher not found")

        school = db.session.get(School, data.school_id)
        if not school:
            raise NotFoundError("Selected school not found")

        school_class = db.session.get(SchoolClass, data.class_id)
        if not school_class:
            raise NotFoundError("Selected class not found")
        if school_class.school_id != school.id:
            raise ValidationError("Selected class does not belong to the selected school")

        existing = TeacherAssignment.query.filter_by(
            teacher_id=teacher.id, class_id=school_class.id, is_active=True
        ).first()
        if existing:
            raise ConflictError("This teacher is already assigned to this class")

        assignment = TeacherAssignment(teacher_id=teacher.id, school_id=school.id, class_id=school_class.id)
        db.session.add(assignment)
        db.session.commit()
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="teacher_assignment",
            entity_id=assignment.id,
            new_values={"teacherId": teacher.id, "schoolId": school.id, "classId": school_class.id},
            user_id=actor_id,
        )
        return assignment


class TeachingService:
    """Use case: a teacher's own classes, curriculum and lesson records."""

    def _require_teacher(self, teacher: User) -> User:
        if teacher.role != Role.TEACHER or not teacher.teacher_profile:
            raise NotFoundError("Teacher profile not found")
        return teacher

    def _require_assignment(self, teacher: User, class_id: int) -> TeacherAssignment:
        assignment = TeacherAssignment.query.filter_by(
            teacher_id=teacher.id, class_id=class_id, is_active=True
        ).first()
        if not assignment:
            raise AuthorizationError("You are not assigned to this class")
        return assignment

    def active_assignments(self, teacher: User) -> Sequence[TeacherAssignment]:
        self._require_teacher(teacher)
        return (
            TeacherAssignment.query.filter_by(teacher_id=teacher.id, is_active=True)
            .order_by(TeacherAssignment.assigned_at.desc(), TeacherAssignment.id.desc())
            .all()
        )

    def curriculum(self, teacher: User, *, class_id: Optional[int] = None) -> Sequence[CurriculumTopic]:
        self._require_teacher(teacher)
        query = CurriculumTopic.query.filter(CurriculumTopic.teacher_id == teacher.id)
        if class_id is not None:
            self._require_assignment(teacher, class_id)
            query = query.filter(CurriculumTopic.class_id == class_id)
        return query.order_by(CurriculumTopic.class_id.asc(), CurriculumTopic.order_index.asc()).all()

    def create_topic(self, teacher: User, data: TopicCreate) -> CurriculumTopic:
        self._require_teacher(teacher)
        self._require_assignment(teacher, data.class_id)
        topic = CurriculumTopic(
            teacher_id=teacher.id,
            class_id=data.class_id,
            title=data.title,
            description=data.description,
            order_index=data.order_index,
        )
        db.session.add(topic)
        db.session.commit()
        return topic

    def lessons(self, teacher: User) -> Sequence[Lesson]:
        self._require_teacher(teacher)
        return Lesson.query.filter_by(teacher_id=teacher.id).order_by(Lesson.date.desc(), Lesson.id.desc()).all()

    def record_lesson(self, teacher: User, data: LessonCreate) -> Lesson:
        """Store the lesson, its topics and the roll call in one transaction."""
        self._require_teacher(teacher)
        self._require_assignment(teacher, data.class_id)

        lesson = Lesson(
            teacher_id=teacher.id,
            class_id=data.class_id,
            date=data.date.replace(tzinfo=None),
            hours_worked=data.hours_worked,
            notes=data.notes or "",
        )
        if data.topic_ids:
            topics = CurriculumTopic.query.filter(
                CurriculumTopic.id.in_(data.topic_ids),
                CurriculumTopic.class_id == data.class_id,
            ).all()
            lesson.topics = topics

        if data.attendance:
            roster = {
                str(sid)
                for (sid,) in db.session.query(Student.id).filter(Student.class_id == data.class_id).all()
            }
            invalid = [sid for sid in data.attendance if sid not in roster]
            if invalid:
                logger.warning("Invalid student ids submitted for class %s: %s", data.class_id, invalid)
            lesson.attendance = [
                StudentAttendance(student_id=int(sid), status=status)
                for sid, status in data.attendance.items()
                if sid in roster
            ]

        db.session.add(lesson)
        db.session.commit()
        return lesson
