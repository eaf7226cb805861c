from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from ..core.enums import Role
from ..core.exceptions import ConflictError
from ..extensions import db
from ..teaching.model import CurriculumTopic, Lesson, TeacherAssignment
from .model import User
from .repository import UserRepository


class SqlAlchemyUserRepository(UserRepository):
    def get_by_id(self, user_id: int) -> Optional[User]:
        return db.session.get(User, user_id)

    def get_by_login(self, login: str) -> Optional[User]:
        login = login.strip()
        return User.query.filter(or_(User.username == login, User.email == login.lower())).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return User.query.filter(User.email == email.strip().lower()).first()

    def find_conflict(self, *, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None) -> Optional[User]:
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return None
        query = User.query.filter(or_(*clauses))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first()

    def list_all(self, *, role: Optional[Role] = None) -> Sequence[User]:
        query = User.query
        if role is not None:
            query = query.filter(User.role == role)
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    def add(self, user: User) -> User:
        db.session.add(user)
        db.session.commit()
        return user

    def save(self, user: User) -> User:
        db.session.commit()
        return user

    def delete(self, user: User) -> None:
        for model in (Lesson, TeacherAssignment, CurriculumTopic):
            if db.session.query(model.id).filter(model.teacher_id == user.id).first():
                raise ConflictError("User has teaching records; deactivate the account instead")
        db.session.delete(user)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise ConflictError("User is still referenced by other records") from exc
