from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.enums import AuditAction
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..system.audit import AuditService
from .model import School, SchoolClass, Student
from .schemas import ClassCreate, SchoolCreate, StudentCreate

logger = logging.getLogger(__name__)


class SchoolService:
    """Use case: maintain schools, their classes and enrolled students."""

    def __init__(self, audit: AuditService):
        self._audit = audit

    # Schools

    def list_schools(self) -> Sequence[School]:
        return School.query.order_by(School.created_at.desc(), School.id.desc()).all()

    def list_active_schools(self) -> Sequence[School]:
        return School.query.filter(School.is_active.is_(True)).order_by(School.name.asc()).all()

    def get_school(self, school_id: int) -> School:
        school = db.session.get(School, school_id)
        if not school:
            raise NotFoundError("School not found")
        return school

    def create_school(self, data: SchoolCreate, *, actor_id: Optional[int] = None) -> School:
        if School.query.filter(School.name == data.name).first():
            raise ValidationError("A school with this name already exists")

        school = School(name=data.name, district=data.district, logo_url=data.logo_url or None)
        db.session.add(school)
        db.session.commit()
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="school",
            entity_id=school.id,
            new_values={"name": school.name, "district": school.district},
            user_id=actor_id,
        )
        return school

    # Classes

    def list_classes(self, *, school_id: Optional[int] = None) -> Sequence[SchoolClass]:
        query = SchoolClass.query
        if school_id is not None:
            query = query.filter(SchoolClass.school_id == school_id)
        return query.order_by(SchoolClass.created_at.desc(), SchoolClass.id.desc()).all()

    def create_class(self, data: ClassCreate, *, actor_id: Optional[int] = None) -> SchoolClass:
        school = db.session.get(School, data.school_id)
        if not school:
            raise NotFoundError("Selected school not found")

        duplicate = SchoolClass.query.filter(
            SchoolClass.school_id == school.id, SchoolClass.name == data.name
        ).first()
        if duplicate:
            raise ConflictError("A class with this name already exists in this school")

        school_class = SchoolClass(
            name=data.name,
            subject=data.subject,
            school_id=school.id,
            is_attendance_enabled=data.is_attendance_enabled,
        )
        db.session.add(school_class)
        db.session.commit()
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="class",
            entity_id=school_class.id,
            new_values={"name": school_class.name, "schoolId": school.id},
            user_id=actor_id,
        )
        return school_class

    # Students

    def list_students(self, *, class_id: Optional[int] = None) -> Sequence[Student]:
        query = Student.query
        if class_id is not None:
            query = query.filter(Student.class_id == class_id)
        return query.order_by(Student.created_at.desc(), Student.id.desc()).all()

    def create_student(self, data: StudentCreate, *, actor_id: Optional[int] = None) -> Student:
        school_class = db.session.get(SchoolClass, data.class_id)
        if not school_class:
            raise NotFoundError("Selected class not found")

        duplicate = Student.query.filter(
            Student.class_id == school_class.id,
            Student.first_name == data.first_name,
            Student.last_name == data.last_name,
        ).first()
        if duplicate:
            raise ConflictError("A student with this name already exists in this class")

        student = Student(first_name=data.first_name, last_name=data.last_name, class_id=school_class.id)
        db.session.add(student)
        db.session.commit()
        self._audit.log(
            action=AuditAction.CREATE,
            entity_type="student",
            entity_id=student.id,
            new_values={"name": student.full_name, "classId": school_class.id},
            user_id=actor_id,
        )
        return student
