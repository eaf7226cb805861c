from __future__ import annotations

from ..common.datetime_utils import now_local
from ..extensions import db


class School(db.Model):
    __tablename__ = "schools"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), unique=True, nullable=False)
    district = db.Column(db.String(200), nullable=False)
    logo_url = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_local, onupdate=now_local)

    classes = db.relationship("SchoolClass", back_populates="school", order_by="SchoolClass.name")
    principal_profile = db.relationship("PrincipalProfile", back_populates="school", uselist=False)

    def to_dict(self, *, with_classes: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "district": self.district,
            "logoUrl": self.logo_url,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }
        if with_classes:
            data["classes"] = [c.to_dict() for c in self.classes]
            principal = self.principal_profile.user if self.principal_profile else None
            data["principal"] = principal.to_dict(with_profiles=False) if principal else None
        return data


class SchoolClass(db.Model):
    __tablename__ = "classes"
    __table_args__ = (db.UniqueConstraint("school_id", "name", name="uq_class_school_name"),)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    subject = db.Column(db.String(200), nullable=False)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False)
    is_attendance_enabled = db.Column(db.Boolean, nullable=False, default=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)

    school = db.relationship("School", back_populates="classes")
    students = db.relationship("Student", back_populates="school_class", order_by="Student.last_name")

    def to_dict(self, *, with_school: bool = False, with_students: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "subject": self.subject,
            "schoolId": self.school_id,
            "isAttendanceEnabled": self.is_attendance_enabled,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }
        if with_school:
            data["school"] = {"id": self.school.id, "name": self.school.name} if self.school else None
        if with_students:
            data["students"] = [s.to_dict() for s in self.students if s.is_active]
        return data


class Student(db.Model):
    __tablename__ = "students"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=now_local)

    school_class = db.relationship("SchoolClass", back_populates="students")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self, *, with_class: bool = False) -> dict:
        data = {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "classId": self.class_id,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }
        if with_class and self.school_class:
            data["class"] = self.school_class.to_dict(with_school=True)
        return data
